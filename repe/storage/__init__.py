"""File-backed storage: the local key/value store and legacy JSON collections."""
