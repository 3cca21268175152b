"""Lookup audit storage: which coordinates were looked up, and by whom."""

import logging
from collections import deque
from typing import Protocol

import redis

from nofish.config import get_settings
from nofish.models.schemas import LookupRecord

logger = logging.getLogger(__name__)

LOOKUPS_KEY = "nofish:lookups"


class LookupStore(Protocol):
    """Protocol for lookup audit storage providers."""

    def insert(self, record: LookupRecord) -> None:
        """Persist a lookup record."""
        ...

    def recent(self, limit: int = 50) -> list[LookupRecord]:
        """Return the most recent records, newest first."""
        ...


class InMemoryLookupStore:
    """In-memory lookup history, bounded to the most recent records."""

    def __init__(self, max_records: int | None = None) -> None:
        settings = get_settings()
        self._records: deque[LookupRecord] = deque(
            maxlen=max_records or settings.lookup_history_size
        )

    def insert(self, record: LookupRecord) -> None:
        self._records.append(record)

    def recent(self, limit: int = 50) -> list[LookupRecord]:
        return list(reversed(self._records))[:limit]


class RedisLookupStore:
    """Redis-backed lookup history for production."""

    def __init__(self, redis_url: str, max_records: int = 1000) -> None:
        """
        Initialize Redis lookup store.

        Args:
            redis_url: Redis connection URL.
            max_records: Length the history list is trimmed to.
        """
        self._redis = redis.from_url(redis_url, decode_responses=True)
        self._max_records = max_records

    def insert(self, record: LookupRecord) -> None:
        pipe = self._redis.pipeline()
        pipe.lpush(LOOKUPS_KEY, record.model_dump_json())
        pipe.ltrim(LOOKUPS_KEY, 0, self._max_records - 1)
        pipe.execute()

    def recent(self, limit: int = 50) -> list[LookupRecord]:
        raw = self._redis.lrange(LOOKUPS_KEY, 0, limit - 1)
        return [LookupRecord.model_validate_json(item) for item in raw]


# Singleton instance
_lookup_store: InMemoryLookupStore | RedisLookupStore | None = None


def get_lookup_store() -> InMemoryLookupStore | RedisLookupStore:
    """Get or create the lookup store instance."""
    global _lookup_store
    if _lookup_store is None:
        settings = get_settings()
        if settings.use_redis and settings.redis_url:
            _lookup_store = RedisLookupStore(
                settings.redis_url, settings.lookup_history_size
            )
            logger.info("Using Redis lookup store")
        else:
            _lookup_store = InMemoryLookupStore()
            logger.info("Using in-memory lookup store")
    return _lookup_store


def clear_lookup_store() -> None:
    """Clear and reset the lookup store."""
    global _lookup_store
    _lookup_store = None


def record_lookup(record: LookupRecord) -> bool:
    """
    Persist a lookup record without ever failing the caller.

    Args:
        record: Lookup to store.

    Returns:
        True if stored, False if the store raised (the error is logged).
    """
    try:
        get_lookup_store().insert(record)
        return True
    except Exception as e:
        logger.error(f"Failed to log lookup: {e}", exc_info=True)
        return False
