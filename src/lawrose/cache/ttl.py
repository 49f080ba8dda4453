"""TTL policy: explicit override > per-category TTL > global default."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from lawrose.cache.types import CacheKey, CacheKeyType, KeyLike

if TYPE_CHECKING:
    from lawrose.config import Settings

logger = logging.getLogger(__name__)


class TTLPolicy:
    """Immutable category -> TTL table.

    Built once at startup. Every category resolves to a positive TTL: a zero,
    negative or missing configured value falls back to the default so a
    misconfiguration can never disable expiry.
    """

    def __init__(self, default_ttl: int, table: Mapping[CacheKeyType, int] | None = None):
        if default_ttl <= 0:
            raise ValueError(f"default TTL must be a positive number of seconds, got {default_ttl}")

        resolved: dict[CacheKeyType, int] = {}
        for key_type, ttl in (table or {}).items():
            if not isinstance(key_type, CacheKeyType):
                raise TypeError(f"Unknown cache key type in TTL table: {key_type!r}")
            if ttl <= 0:
                logger.warning(
                    f"TTL for {key_type.value} is {ttl}, using default of {default_ttl}s"
                )
                continue
            resolved[key_type] = int(ttl)

        for key_type in CacheKeyType:
            resolved.setdefault(key_type, default_ttl)

        self.default_ttl = default_ttl
        self._table: Mapping[CacheKeyType, int] = MappingProxyType(resolved)

    @classmethod
    def from_settings(cls, settings: Settings) -> TTLPolicy:
        table = {CacheKeyType(name): ttl for name, ttl in settings.ttl_table().items()}
        return cls(settings.redis_default_ttl, table)

    @property
    def table(self) -> Mapping[CacheKeyType, int]:
        return self._table

    def resolve(self, key_type: CacheKeyType | None = None, override: int | None = None) -> int:
        """TTL in seconds for a category, honouring an explicit override."""
        if override is not None and override > 0:
            return int(override)
        if key_type is not None:
            return self._table[key_type]
        return self.default_ttl

    def resolve_for(self, key: KeyLike, override: int | None = None) -> int:
        """TTL for a key: structured keys use their category, raw keys the default."""
        key_type = key.type if isinstance(key, CacheKey) else None
        return self.resolve(key_type, override)
