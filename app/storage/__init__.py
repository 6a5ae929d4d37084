"""Content store backends."""

from app.config import Settings
from app.database import create_session_factory
from app.storage.base import ContentStore
from app.storage.memory import MemoryStore
from app.storage.sql import SqlStore


def create_store(settings: Settings) -> ContentStore:
    """Build the store selected by STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "sql":
        return SqlStore(create_session_factory(settings.DATABASE_URL, echo=settings.DEBUG))
    return MemoryStore()


__all__ = ["ContentStore", "MemoryStore", "SqlStore", "create_store"]
