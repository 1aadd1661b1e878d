"""Database package for the asset tagging service."""

from assettags.db.base import Base
from assettags.db.session import async_session_maker, engine, get_db

__all__ = [
    "Base",
    "async_session_maker",
    "engine",
    "get_db",
]
