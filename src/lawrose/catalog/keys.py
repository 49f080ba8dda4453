"""Catalog cache keys.

All catalog entries live under the product_data category:

    {prefix}product_data:{family}[:{sub_key}]

Families: detail, slug, list, featured, related, suggestions, filters,
inventory_stats, views, category, category_tree, collection, collection_list.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Any

import orjson

from lawrose.cache.types import CacheKey, CacheKeyType

CATALOG_TYPE = CacheKeyType.PRODUCT_DATA


class CatalogTTL:
    """Per-family TTLs in seconds."""

    PRODUCT_DETAIL = 3600
    PRODUCT_LIST = 1800
    FEATURED = 3600
    RELATED = 1800
    FILTERS = 7200
    INVENTORY_STATS = 300
    SUGGESTIONS = 300
    CATEGORY = 3600
    COLLECTION = 3600


class CatalogKeys:
    """Cache key generator for catalog lookups."""

    @staticmethod
    def _key(family: str, sub_key: str | None = None) -> CacheKey:
        return CacheKey(type=CATALOG_TYPE, identifier=family, sub_key=sub_key)

    @classmethod
    def product_detail(cls, product_id: str) -> CacheKey:
        return cls._key("detail", product_id)

    @classmethod
    def product_slug(cls, slug: str) -> CacheKey:
        return cls._key("slug", slug)

    @classmethod
    def product_list(cls, query: Mapping[str, Any]) -> CacheKey:
        """Key for one list query.

        The fingerprint ignores parameter order and unset (None) parameters,
        so equivalent queries share an entry.
        """
        return cls._key("list", cls.query_fingerprint(query))

    @classmethod
    def featured(cls, limit: int) -> CacheKey:
        return cls._key("featured", str(limit))

    @classmethod
    def related(cls, product_id: str, limit: int) -> CacheKey:
        return cls._key("related", f"{product_id}:{limit}")

    @classmethod
    def suggestions(cls, query: str, limit: int) -> CacheKey:
        return cls._key("suggestions", f"{query.strip().lower()}:{limit}")

    @classmethod
    def filters(cls) -> CacheKey:
        return cls._key("filters")

    @classmethod
    def inventory_stats(cls) -> CacheKey:
        return cls._key("inventory_stats")

    @classmethod
    def product_views(cls, product_id: str) -> CacheKey:
        return cls._key("views", product_id)

    @classmethod
    def category(cls, slug: str) -> CacheKey:
        return cls._key("category", slug)

    @classmethod
    def category_tree(cls) -> CacheKey:
        return cls._key("category_tree")

    @classmethod
    def collection(cls, slug: str) -> CacheKey:
        return cls._key("collection", slug)

    @classmethod
    def collection_list(cls) -> CacheKey:
        return cls._key("collection_list")

    @staticmethod
    def query_fingerprint(query: Mapping[str, Any]) -> str:
        params = {k: v for k, v in query.items() if v is not None}
        digest = hashlib.sha256(orjson.dumps(params, default=str, option=orjson.OPT_SORT_KEYS))
        return digest.hexdigest()[:24]

    @staticmethod
    def family_pattern(family: str) -> str:
        """Logical pattern for every key of a family.

        Use with CacheService.clear_pattern (SCAN + DEL).
        """
        return f"{CATALOG_TYPE.value}:{family}:*"

    @classmethod
    def related_pattern(cls, product_id: str) -> str:
        """Logical pattern for every related-products entry of one product."""
        return f"{CATALOG_TYPE.value}:related:{product_id}:*"
