"""Cache failure taxonomy.

These never escape the public cache API: every operation catches them at its
boundary, logs, and returns its documented fallback (None, False, 0, -1, []).
"""

from __future__ import annotations

import asyncio

from redis.exceptions import RedisError


class CacheError(Exception):
    """Base class for cache-layer failures."""


class CacheSerializationError(CacheError):
    """Value could not be encoded for storage."""


class CacheDeserializationError(CacheError):
    """Stored payload could not be decoded into the requested type."""


# Exceptions raised by the driver for network or server problems.
# UnicodeDecodeError comes from a strict-decoding client reading a value or
# key name that another writer stored as non-UTF-8 bytes.
BACKEND_ERRORS: tuple[type[BaseException], ...] = (
    RedisError,
    OSError,
    asyncio.TimeoutError,
    UnicodeDecodeError,
)
