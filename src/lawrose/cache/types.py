"""Cache data model for Lawrose.

Key format: {prefix}{type}:{identifier}[:{sub_key}]

Where:
- prefix: configured namespace, "lawrose:" by default
- type: one of the CacheKeyType values, always the first segment
- identifier: entity or family identifier ("detail", a session id, ...)
- sub_key: optional discriminator (product id, slug, query fingerprint)

Raw string keys skip the type segment and are prefixed as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CacheKeyType(str, Enum):
    """Data categories, each with its own TTL."""

    SESSION = "session"
    JWT_BLACKLIST = "jwt_blacklist"
    USER_DATA = "user_data"
    PRODUCT_DATA = "product_data"
    CART_DATA = "cart_data"
    RATE_LIMIT = "rate_limit"
    OTP_CODES = "otp_codes"
    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"


@dataclass(frozen=True)
class CacheKey:
    """Structured cache key."""

    type: CacheKeyType
    identifier: str
    sub_key: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, CacheKeyType):
            raise TypeError(f"CacheKey.type must be a CacheKeyType, got {self.type!r}")
        if not self.identifier:
            raise ValueError("CacheKey.identifier must not be empty")


# Anything the key codec accepts
KeyLike = CacheKey | str


@dataclass(frozen=True)
class CacheSetOptions:
    """Write options for a single set.

    Attributes:
        ttl: Explicit TTL in seconds, overrides the category TTL
        nx: Only write if the key is absent
        xx: Only write if the key is present
    """

    ttl: int | None = None
    nx: bool = False
    xx: bool = False

    def __post_init__(self) -> None:
        if self.nx and self.xx:
            raise ValueError("nx and xx are mutually exclusive")


@dataclass(frozen=True)
class BulkCacheItem(Generic[T]):
    """One entry of a pipelined multi-set."""

    key: KeyLike
    value: T
    ttl: int | None = None


@dataclass(frozen=True)
class CacheSearchResult(Generic[T]):
    """A key found by pattern search, with its value and remaining TTL."""

    key: str
    value: T
    ttl: int

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value, "ttl": self.ttl}


@dataclass(frozen=True)
class CacheStats:
    """Backend introspection snapshot."""

    total_keys: int = 0
    memory_usage: str = "Unknown"

    def to_dict(self) -> dict[str, Any]:
        return {"total_keys": self.total_keys, "memory_usage": self.memory_usage}
