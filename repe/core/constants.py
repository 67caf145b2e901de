"""Application constants."""

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
EXERCISE_LIBRARY_LIMIT = 1000

# Exercise names
MAX_EXERCISE_NAME_LENGTH = 120
DEFAULT_EXERCISE_CATEGORY = "other"

# Set ranges
RPE_MIN = 0
RPE_MAX = 10
