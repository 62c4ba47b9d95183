"""
Shared scraping runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from catalog.domain.catalog import CatalogCategory, ListingEntry, Product, ScrapeTask


@dataclass(frozen=True)
class ListingPage:
    """
    Extractor output for one listing page.
    """

    entries: list[ListingEntry]
    has_more: bool


@dataclass(frozen=True)
class CollectedPage:
    """
    One listing page after run-wide deduplication.

    `fresh_in_category` counts links not seen before in this category and
    drives pagination; `new_entries` holds the links not seen anywhere in the
    run and drives detail work.
    """

    category: CatalogCategory
    page_number: int
    found: int
    fresh_in_category: int
    new_entries: list[ListingEntry]
    should_continue: bool


@dataclass(frozen=True)
class TaskOutcome:
    """
    Result of handling one scheduler task.
    """

    products: list[Product] = field(default_factory=list)
    follow_ups: list[ScrapeTask] = field(default_factory=list)


@dataclass
class SchedulerStats:
    """
    Terminal task counts for one scheduler run.
    """

    completed: int = 0
    skipped: int = 0
    discarded: int = 0
    errors: list[str] = field(default_factory=list)
