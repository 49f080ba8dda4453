"""Catalog caching for Lawrose.

Key builders, cache-aside readers and mutation-time invalidation for
products, categories and collections. The loaders that hit the catalog store
are supplied by the catalog services.
"""

from lawrose.catalog.cache import CategoryCache, CollectionCache, ProductCache
from lawrose.catalog.invalidation import CatalogInvalidator
from lawrose.catalog.keys import CatalogKeys, CatalogTTL

__all__ = [
    "CatalogInvalidator",
    "CatalogKeys",
    "CatalogTTL",
    "CategoryCache",
    "CollectionCache",
    "ProductCache",
]
