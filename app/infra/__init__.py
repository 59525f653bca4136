"""Infrastructure - Database, cache, logging."""

from app.infra.cache import CacheInvalidator, CacheKeys, TTLCache, get_cache
from app.infra.database import close_db_engine, get_db_session
from app.infra.logging import setup_logging, get_logger

__all__ = [
    "CacheInvalidator",
    "CacheKeys",
    "TTLCache",
    "get_cache",
    "get_db_session",
    "close_db_engine",
    "setup_logging",
    "get_logger",
]
