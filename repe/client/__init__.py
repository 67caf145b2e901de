"""Client-side pieces: API client, timer, offline queue and active-workout tracker."""
