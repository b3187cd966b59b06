"""
Product catalog package - storage and lookup of catalog entities.

- core: Import options (comment marker, wallpaper dimension policy) and the
  access-token check
- entity_store: Deduplicating per-kind entity storage
- validation: Structural validators for countries, devices and content
- product_catalog: The catalog itself, tying the stores to the search engine
"""

from .core import (
    DEFAULT_WALLPAPER_SIZE,
    ImportOptions,
    WallpaperDimensionPolicy,
    validate_access_token,
)
from .entity_store import EntityStore
from .product_catalog import ProductCatalog
from .validation import validate_content, validate_country, validate_device

__all__ = [
    "DEFAULT_WALLPAPER_SIZE",
    "EntityStore",
    "ImportOptions",
    "ProductCatalog",
    "WallpaperDimensionPolicy",
    "validate_access_token",
    "validate_content",
    "validate_country",
    "validate_device",
]
