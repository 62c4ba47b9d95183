"""
Server-rendered HTML storefront (Odoo-style `/shop` pages).
"""

from __future__ import annotations

from catalog.domain.catalog import CatalogCategory, ListingEntry, RawDetail
from catalog.scraping.parsing import StorefrontHTMLParser
from catalog.scraping.parsing.html_parsers import DEFAULT_OUT_OF_STOCK_MARKERS
from catalog.scraping.sources.base import CatalogSource
from catalog.scraping.types import ListingPage
from catalog.scraping.urls import with_page


class StorefrontHTMLSource(CatalogSource):
    """
    Categories from the shop sidebar, `?page=N` listings, one detail page per
    product.
    """

    def discover_categories(self) -> list[CatalogCategory]:
        content = self.fetcher.fetch(self.config.url(self.config.categories_path))
        return StorefrontHTMLParser.parse_categories(content, base_url=self.config.base_url)

    def listing_page(self, category: CatalogCategory, page_number: int) -> ListingPage:
        content = self.fetcher.fetch(with_page(category.endpoint, page_number))
        return StorefrontHTMLParser.parse_listing(
            content,
            base_url=self.config.base_url,
            category=category.name,
            page_number=page_number,
        )

    def fetch_detail(self, entry: ListingEntry) -> RawDetail:
        content = self.fetcher.fetch(entry.url)
        return StorefrontHTMLParser.parse_detail(
            content,
            base_url=self.config.base_url,
            out_of_stock_markers=self.config.out_of_stock_markers or DEFAULT_OUT_OF_STOCK_MARKERS,
        )
