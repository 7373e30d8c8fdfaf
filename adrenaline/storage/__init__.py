"""
Snapshot persistence
"""
import logging

from adrenaline.core.config import settings
from adrenaline.storage.base import StateStore
from adrenaline.storage.file import JsonFileStore
from adrenaline.storage.memory import InMemoryStore

logger = logging.getLogger(__name__)


def create_store(backend: str = None) -> StateStore:
    """Build the configured store. Unknown backends fall back to memory."""
    backend = (backend or settings.STORAGE_BACKEND).lower()

    if backend == "file":
        return JsonFileStore(settings.STATE_DIR)
    if backend == "redis":
        from adrenaline.storage.redis_store import RedisStore
        return RedisStore(settings.REDIS_URL)
    if backend != "memory":
        logger.warning(f"Unknown storage backend {backend!r}, state will not survive restarts")
    return InMemoryStore()


__all__ = [
    "StateStore",
    "InMemoryStore",
    "JsonFileStore",
    "create_store",
]
