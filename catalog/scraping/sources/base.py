"""
Base source abstraction: where a storefront keeps its categories, listing
pages and detail pages, and which extractor reads each of them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from catalog.domain.catalog import CatalogCategory, ListingEntry, RawDetail
from catalog.scraping.config.models import CatalogSourceConfig
from catalog.scraping.fetcher import Fetcher
from catalog.scraping.types import ListingPage


class CatalogSource(ABC):
    """
    Binds a storefront's URL layout to the role-specific extractors.
    """

    def __init__(self, *, config: CatalogSourceConfig, fetcher: Fetcher) -> None:
        self.config = config
        self.fetcher = fetcher

    @property
    def name(self) -> str:
        return self.config.name

    @abstractmethod
    def discover_categories(self) -> list[CatalogCategory]:
        """
        Fetch the category index. Fetch failures propagate to the caller.
        """

    @abstractmethod
    def listing_page(self, category: CatalogCategory, page_number: int) -> ListingPage:
        """
        Fetch and extract one listing page of `category`.
        """

    def detail(self, entry: ListingEntry) -> RawDetail:
        """
        Raw detail fields for `entry`, fetching only when the listing did not
        already carry them.
        """

        if entry.inline is not None:
            return entry.inline
        return self.fetch_detail(entry)

    @abstractmethod
    def fetch_detail(self, entry: ListingEntry) -> RawDetail:
        """
        Fetch and extract the detail page of `entry`.
        """
