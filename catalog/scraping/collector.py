"""
Listing collector: claims product links from listing pages.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from catalog.domain.catalog import CatalogCategory, ListingEntry
from catalog.scraping.logging_utils import log_event
from catalog.scraping.sources import CatalogSource
from catalog.scraping.types import CollectedPage
from catalog.scraping.urls import canonical_url

logger = logging.getLogger(__name__)


class ListingCollector:
    """
    Collects listing entries one page at a time.

    Links are deduplicated per category (to decide when pagination stops) and
    across the whole run (so each product gets exactly one detail task). Every
    category that lists a link is remembered with its first entry, so the final
    owner of a shared product does not depend on which worker got there first.
    All state sits behind one lock because pages of different categories are
    collected by different workers.
    """

    def __init__(self, *, source: CatalogSource) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._seen_by_category: dict[str, set[str]] = {}
        self._listings: dict[str, dict[str, ListingEntry]] = {}

    def collect_page(self, category: CatalogCategory, page_number: int) -> CollectedPage:
        """
        Fetch one listing page and claim its links. Fetch errors propagate.
        """

        page = self._source.listing_page(category, page_number)
        fresh, new_entries = self._claim(category, page.entries)
        should_continue = fresh > 0 and page.has_more
        log_event(
            logger,
            logging.INFO,
            "listing_page_collected",
            category=category.name,
            page=page_number,
            found=len(page.entries),
            fresh=fresh,
            new=len(new_entries),
            has_more=page.has_more,
        )
        if not should_continue:
            log_event(logger, logging.INFO, "category_exhausted", category=category.name, last_page=page_number)
        return CollectedPage(
            category=category,
            page_number=page_number,
            found=len(page.entries),
            fresh_in_category=fresh,
            new_entries=new_entries,
            should_continue=should_continue,
        )

    def listings(self, url: str) -> dict[str, ListingEntry]:
        """
        Category name -> first entry of that category listing `url`.
        """

        with self._lock:
            return dict(self._listings.get(canonical_url(url), {}))

    def _claim(
        self,
        category: CatalogCategory,
        entries: Iterable[ListingEntry],
    ) -> tuple[int, list[ListingEntry]]:
        fresh = 0
        new_entries: list[ListingEntry] = []
        with self._lock:
            category_seen = self._seen_by_category.setdefault(category.name, set())
            for entry in entries:
                key = canonical_url(entry.url)
                if key in category_seen:
                    continue
                category_seen.add(key)
                self._listings.setdefault(key, {})[category.name] = entry
                fresh += 1
                if key in self._seen:
                    continue
                self._seen.add(key)
                new_entries.append(entry)
        return fresh, new_entries
