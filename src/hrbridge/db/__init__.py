"""Database layer: engine, sessions, models and repositories."""

from hrbridge.db.config import close_db, get_db, init_db, transaction

__all__ = ["close_db", "get_db", "init_db", "transaction"]
