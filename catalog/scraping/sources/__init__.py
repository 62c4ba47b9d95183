"""
Catalog source adapters.
"""

from catalog.scraping.sources.base import CatalogSource
from catalog.scraping.sources.store_api import StoreAPISource
from catalog.scraping.sources.storefront_html import StorefrontHTMLSource

__all__ = ["CatalogSource", "StoreAPISource", "StorefrontHTMLSource"]
