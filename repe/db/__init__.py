"""Database package: engine, session, base."""

from repe.db.session import Database, get_db

__all__ = ["Database", "get_db"]
