"""Cache-aside readers for catalog lookups.

Each reader takes a loader, an async callable that queries the catalog store
and returns the document (or None when it does not exist). Misses call the
loader once and cache its result with the family TTL; None results are not
cached, so a missing product is looked up again next time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from lawrose.cache.types import BulkCacheItem, CacheSetOptions
from lawrose.catalog.invalidation import CatalogInvalidator
from lawrose.catalog.keys import CATALOG_TYPE, CatalogKeys, CatalogTTL

if TYPE_CHECKING:
    from lawrose.cache.aside import Factory
    from lawrose.cache.service import CacheService

T = TypeVar("T")


class ProductCache:
    """Product lookups, write-through on create/update and eviction."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache
        self.invalidator = CatalogInvalidator(cache)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_by_id(
        self, product_id: str, loader: Factory[T], model: type[T] | Any | None = None
    ) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.product_detail(product_id),
            loader,
            CacheSetOptions(ttl=CatalogTTL.PRODUCT_DETAIL),
            model,
        )

    async def get_by_slug(
        self, slug: str, loader: Factory[T], model: type[T] | Any | None = None
    ) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.product_slug(slug),
            loader,
            CacheSetOptions(ttl=CatalogTTL.PRODUCT_DETAIL),
            model,
        )

    async def get_list(self, query: Mapping[str, Any], loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.product_list(query),
            loader,
            CacheSetOptions(ttl=CatalogTTL.PRODUCT_LIST),
        )

    async def get_featured(self, limit: int, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.featured(limit), loader, CacheSetOptions(ttl=CatalogTTL.FEATURED)
        )

    async def get_related(self, product_id: str, limit: int, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.related(product_id, limit),
            loader,
            CacheSetOptions(ttl=CatalogTTL.RELATED),
        )

    async def get_suggestions(self, query: str, limit: int, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.suggestions(query, limit),
            loader,
            CacheSetOptions(ttl=CatalogTTL.SUGGESTIONS),
        )

    async def get_filters(self, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.filters(), loader, CacheSetOptions(ttl=CatalogTTL.FILTERS)
        )

    async def get_inventory_stats(self, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.inventory_stats(),
            loader,
            CacheSetOptions(ttl=CatalogTTL.INVENTORY_STATS),
        )

    # -------------------------------------------------------------------------
    # View counters
    # -------------------------------------------------------------------------

    async def record_view(self, product_id: str) -> int | None:
        """Count one view; atomic under concurrent viewers.

        The counter expires one category TTL after the last view.
        """
        return await self.cache.increment(
            CatalogKeys.product_views(product_id),
            ttl=self.cache.ttl_policy.resolve(CATALOG_TYPE),
        )

    async def view_count(self, product_id: str) -> int:
        count = await self.cache.get(CatalogKeys.product_views(product_id))
        return int(count) if isinstance(count, int) else 0

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def cache_product(self, product: Mapping[str, Any]) -> bool:
        """Write a product under its id and, if it has one, its slug."""
        items: list[BulkCacheItem[Any]] = [
            BulkCacheItem(
                key=CatalogKeys.product_detail(str(product["id"])),
                value=product,
                ttl=CatalogTTL.PRODUCT_DETAIL,
            )
        ]
        if product.get("slug"):
            items.append(
                BulkCacheItem(
                    key=CatalogKeys.product_slug(str(product["slug"])),
                    value=product,
                    ttl=CatalogTTL.PRODUCT_DETAIL,
                )
            )
        return await self.cache.mset(items)

    async def on_created(self, product: Mapping[str, Any]) -> int:
        await self.cache_product(product)
        return await self.invalidator.invalidate_listings()

    async def on_updated(
        self, product: Mapping[str, Any], previous_slug: str | None = None
    ) -> int:
        """Replace the cached product and drop everything aggregated from it."""
        product_id = str(product["id"])
        removed = await self.invalidator.invalidate_product(product_id, previous_slug)
        await self.cache_product(product)
        return removed

    async def on_deleted(self, product_id: str, slug: str | None = None) -> int:
        return await self.invalidator.invalidate_product(product_id, slug)


class CategoryCache:
    """Category lookups."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache
        self.invalidator = CatalogInvalidator(cache)

    async def get_category(self, slug: str, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.category(slug), loader, CacheSetOptions(ttl=CatalogTTL.CATEGORY)
        )

    async def get_tree(self, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.category_tree(), loader, CacheSetOptions(ttl=CatalogTTL.CATEGORY)
        )

    async def on_changed(self, slug: str | None = None) -> int:
        return await self.invalidator.invalidate_category(slug)


class CollectionCache:
    """Collection lookups."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache
        self.invalidator = CatalogInvalidator(cache)

    async def get_collection(self, slug: str, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.collection(slug), loader, CacheSetOptions(ttl=CatalogTTL.COLLECTION)
        )

    async def get_all(self, loader: Factory[T]) -> T | None:
        return await self.cache.get_or_set(
            CatalogKeys.collection_list(), loader, CacheSetOptions(ttl=CatalogTTL.COLLECTION)
        )

    async def on_changed(self, slug: str | None = None) -> int:
        return await self.invalidator.invalidate_collection(slug)
