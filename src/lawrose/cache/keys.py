"""Cache key codec for Lawrose.

Key format: {prefix}{type}:{identifier}[:{sub_key}]

The type is always the first segment after the prefix, so keys of two
categories can never alias. Raw string keys are prefixed verbatim and are the
escape hatch for ad-hoc namespaces.
"""

from __future__ import annotations

from lawrose.cache.types import CacheKey, CacheKeyType, KeyLike

SEPARATOR = ":"


class KeyCodec:
    """Renders logical keys to physical keys under a global prefix."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def render(self, key: KeyLike) -> str:
        """Physical key for a structured or raw key."""
        if isinstance(key, str):
            return f"{self.prefix}{key}"

        base = f"{self.prefix}{key.type.value}{SEPARATOR}{key.identifier}"
        if key.sub_key:
            return f"{base}{SEPARATOR}{key.sub_key}"
        return base

    def render_many(self, keys: list[KeyLike]) -> list[str]:
        return [self.render(key) for key in keys]

    def pattern(self, pattern: str) -> str:
        """Physical glob pattern for a pattern relative to the logical keyspace."""
        return f"{self.prefix}{pattern}"

    def type_pattern(self, key_type: CacheKeyType) -> str:
        """Logical pattern matching every key of one category."""
        return f"{key_type.value}{SEPARATOR}*"

    def strip(self, physical: str | bytes) -> str:
        """Logical key for a physical key (the prefix removed once, from the front)."""
        if isinstance(physical, bytes):
            physical = physical.decode()
        if self.prefix and physical.startswith(self.prefix):
            return physical[len(self.prefix) :]
        return physical

    def parse(self, physical: str | bytes) -> CacheKey | None:
        """Parse a physical key back into a CacheKey.

        Returns None if the key is outside the prefix, or does not start with a
        known category and identifier. Identifiers containing the separator
        cannot be told apart from a sub key; the first two segments win.
        """
        if isinstance(physical, bytes):
            physical = physical.decode()
        if not physical.startswith(self.prefix):
            return None

        parts = physical[len(self.prefix) :].split(SEPARATOR, 2)
        if len(parts) < 2 or not parts[1]:
            return None

        try:
            key_type = CacheKeyType(parts[0])
        except ValueError:
            return None

        return CacheKey(
            type=key_type,
            identifier=parts[1],
            sub_key=parts[2] if len(parts) > 2 else None,
        )

    @staticmethod
    def key_type_of(key: KeyLike) -> str:
        """Category label for metrics; "raw" for string keys."""
        if isinstance(key, str):
            return "raw"
        return key.type.value
