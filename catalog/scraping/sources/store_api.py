"""
JSON product-listing API (WooCommerce Store API).
"""

from __future__ import annotations

import logging

from catalog.domain.catalog import CatalogCategory, ListingEntry, RawDetail
from catalog.scraping.logging_utils import log_event
from catalog.scraping.parsing import ExtractionError, StoreAPIParser
from catalog.scraping.sources.base import CatalogSource
from catalog.scraping.types import ListingPage

logger = logging.getLogger(__name__)

CATEGORY_PAGE_SIZE = 100
MAX_CATEGORY_PAGES = 50


class StoreAPISource(CatalogSource):
    """
    Categories and listings come from the API; listing records are complete,
    so no detail page is ever fetched.
    """

    def discover_categories(self) -> list[CatalogCategory]:
        url = self.config.url(self.config.categories_path)
        categories: dict[str, CatalogCategory] = {}
        for page in range(1, MAX_CATEGORY_PAGES + 1):
            log_event(logger, logging.INFO, "category_index_page", source=self.name, page=page)
            payload = self.fetcher.fetch_json(url, params={"per_page": CATEGORY_PAGE_SIZE, "page": page})
            if isinstance(payload, list) and not payload:
                break
            for category in StoreAPIParser.parse_categories(
                payload,
                ignored_slugs=self.config.ignored_category_slugs,
            ):
                categories.setdefault(category.name, category)
        return list(categories.values())

    def listing_page(self, category: CatalogCategory, page_number: int) -> ListingPage:
        payload = self.fetcher.fetch_json(
            self.config.url(self.config.listing_path),
            params={
                "category": category.endpoint,
                "page": page_number,
                "per_page": self.config.per_page,
            },
        )
        return StoreAPIParser.parse_listing(payload, category=category.name)

    def fetch_detail(self, entry: ListingEntry) -> RawDetail:
        raise ExtractionError(f"Listing record for {entry.url} carried no product fields.")
