"""
Config helpers for catalog scraping.
"""

from catalog.scraping.config.loader import (
    get_catalog_scraping_settings,
    load_source_configs,
    select_source,
)
from catalog.scraping.config.models import CatalogScrapingSettings, CatalogSourceConfig

__all__ = [
    "CatalogScrapingSettings",
    "CatalogSourceConfig",
    "get_catalog_scraping_settings",
    "load_source_configs",
    "select_source",
]
