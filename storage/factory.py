from __future__ import annotations

import logging
from functools import lru_cache

from db.engine import get_engine
from settings.config import settings
from storage.database_storage import DatabaseStorage
from storage.interface import Storage
from storage.memory_storage import MemStorage


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def build_storage() -> Storage:
    if settings.STORAGE_BACKEND == "database":
        logger.info("Using database storage")
        return DatabaseStorage(get_engine())
    logger.info("Using in-memory storage")
    return MemStorage()


async def get_storage() -> Storage:
    """FastAPI dependency returning the process-wide storage backend."""
    return build_storage()
