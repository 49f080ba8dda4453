"""Catalog cache invalidation.

Called by the catalog services after a write has committed. Invalidation
issued before the commit can be undone by a concurrent reader repopulating
the entry from the old row.

Example:
    invalidator = CatalogInvalidator(cache)

    await repo.update(product_id, changes)
    await session.commit()
    await invalidator.invalidate_product(product_id, slug=old_slug)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lawrose.catalog.keys import CATALOG_TYPE, CatalogKeys

if TYPE_CHECKING:
    from lawrose.cache.service import CacheService

logger = logging.getLogger(__name__)

# Families derived from many products at once
LISTING_FAMILIES = ("list", "featured", "suggestions")


class CatalogInvalidator:
    """Removes cache entries made stale by catalog mutations.

    Every method returns the number of keys removed; a cache outage makes
    them no-ops returning 0.
    """

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache

    async def evict_product(self, product_id: str, slug: str | None = None) -> int:
        """Drop the detail entries of one product."""
        keys = [CatalogKeys.product_detail(product_id)]
        if slug:
            keys.append(CatalogKeys.product_slug(slug))
        return await self.cache.mdel(keys)

    async def invalidate_listings(self, product_id: str | None = None) -> int:
        """Drop aggregate entries: lists, featured, suggestions, filters, stats.

        With ``product_id`` also drops that product's related-products entries.
        """
        removed = 0
        for family in LISTING_FAMILIES:
            removed += await self.cache.clear_pattern(CatalogKeys.family_pattern(family))
        if product_id:
            removed += await self.cache.clear_pattern(CatalogKeys.related_pattern(product_id))
        removed += await self.cache.mdel([CatalogKeys.filters(), CatalogKeys.inventory_stats()])
        return removed

    async def invalidate_product(self, product_id: str, slug: str | None = None) -> int:
        """Drop one product and everything aggregated from it."""
        removed = await self.evict_product(product_id, slug)
        removed += await self.invalidate_listings(product_id)
        logger.info(f"Invalidated {removed} cache entries for product {product_id}")
        return removed

    async def invalidate_inventory(self) -> int:
        """Stock changed: stats and featured selections are stale."""
        removed = await self.cache.mdel([CatalogKeys.inventory_stats()])
        removed += await self.cache.clear_pattern(CatalogKeys.family_pattern("featured"))
        return removed

    async def invalidate_category(self, slug: str | None = None) -> int:
        """A category changed; listings filtered by category are stale too."""
        keys = [CatalogKeys.category_tree()]
        if slug:
            keys.append(CatalogKeys.category(slug))
        removed = await self.cache.mdel(keys)
        removed += await self.cache.clear_pattern(CatalogKeys.family_pattern("list"))
        removed += await self.cache.mdel([CatalogKeys.filters()])
        logger.info(f"Invalidated {removed} cache entries for category {slug or '*'}")
        return removed

    async def invalidate_collection(self, slug: str | None = None) -> int:
        """A collection changed; listings filtered by collection are stale too."""
        keys = [CatalogKeys.collection_list()]
        if slug:
            keys.append(CatalogKeys.collection(slug))
        removed = await self.cache.mdel(keys)
        removed += await self.cache.clear_pattern(CatalogKeys.family_pattern("list"))
        logger.info(f"Invalidated {removed} cache entries for collection {slug or '*'}")
        return removed

    async def invalidate_all(self) -> int:
        """Drop the whole catalog namespace, view counters included."""
        removed = await self.cache.clear_cache_type(CATALOG_TYPE)
        logger.info(f"Invalidated all {removed} catalog cache entries")
        return removed
