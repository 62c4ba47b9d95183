"""
Catalog scraping engine: discovery, scheduling and persistence for one run.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence

import requests

from catalog.domain.catalog import (
    CatalogCategory,
    DetailTask,
    ListingEntry,
    PageTask,
    Product,
    RawDetail,
    ScrapeTask,
)
from catalog.domain.run_summary import RunSummary
from catalog.scraping.collector import ListingCollector
from catalog.scraping.config.models import CatalogScrapingSettings, CatalogSourceConfig
from catalog.scraping.fetcher import Fetcher, FetchError
from catalog.scraping.logging_utils import log_event
from catalog.scraping.normalization import ProductNormalizer
from catalog.scraping.parsing import ExtractionError
from catalog.scraping.registry import SourceRegistry
from catalog.scraping.scheduler import TaskScheduler
from catalog.scraping.sources import CatalogSource
from catalog.scraping.storage import ProductSink
from catalog.scraping.types import TaskOutcome
from catalog.scraping.urls import canonical_url

logger = logging.getLogger(__name__)


class CategoryDiscoveryError(RuntimeError):
    """
    Raised when the category index cannot be fetched or lists nothing.
    """


class CatalogTaskHandler:
    """
    Turns one scheduler task into products and follow-up tasks.
    """

    def __init__(
        self,
        *,
        source: CatalogSource,
        collector: ListingCollector,
        normalizer: ProductNormalizer,
        category_order: Sequence[str] = (),
    ) -> None:
        self._source = source
        self._collector = collector
        self._normalizer = normalizer
        self._category_rank = {name: rank for rank, name in enumerate(category_order)}
        self._raw_lock = threading.Lock()
        self._raw_by_link: dict[str, RawDetail] = {}

    def __call__(self, task: ScrapeTask) -> TaskOutcome:
        if isinstance(task, PageTask):
            return self.handle_page(task)
        if isinstance(task, DetailTask):
            return self.handle_detail(task)
        raise TypeError(f"Unsupported task type: {type(task).__name__}")

    def handle_page(self, task: PageTask) -> TaskOutcome:
        page = self._collector.collect_page(task.category, task.page_number)
        follow_ups: list[ScrapeTask] = []
        products: list[Product] = []
        if page.should_continue:
            follow_ups.append(task.next_page())
        for entry in page.new_entries:
            if entry.inline is not None:
                products.append(self._normalize(entry.inline, entry))
            else:
                follow_ups.append(DetailTask(entry=entry))
        return TaskOutcome(products=products, follow_ups=follow_ups)

    def handle_detail(self, task: DetailTask) -> TaskOutcome:
        raw = self._source.detail(task.entry)
        return TaskOutcome(products=[self._normalize(raw, task.entry)])

    def settle(self, product: Product) -> Product:
        """
        Re-home a product listed by several categories under the one that was
        discovered first, using that category's listing entry.
        """

        listed = self._collector.listings(product.link)
        if len(listed) < 2:
            return product
        owner = min(listed, key=lambda name: (self._category_rank.get(name, len(self._category_rank)), name))
        entry = listed[owner]
        with self._raw_lock:
            raw = self._raw_by_link.get(canonical_url(product.link))
        if entry.inline is not None:
            raw = entry.inline
        if raw is None:
            return product
        return self._normalizer.normalize(raw, entry)

    def _normalize(self, raw: RawDetail, entry: ListingEntry) -> Product:
        with self._raw_lock:
            self._raw_by_link[canonical_url(entry.url)] = raw
        product = self._normalizer.normalize(raw, entry)
        log_event(
            logger,
            logging.DEBUG,
            "product_scraped",
            link=product.link,
            category=product.category,
            price=product.price,
            stock_state=product.stock_state.value,
        )
        return product


class CatalogScrapingEngine:
    """
    Runs one end-to-end catalog scrape for a single source.
    """

    def __init__(
        self,
        *,
        settings: CatalogScrapingSettings,
        source_config: CatalogSourceConfig,
        sink: ProductSink,
        registry: SourceRegistry | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.source_config = source_config
        self.sink = sink
        self.registry = registry or SourceRegistry()
        self._session = session
        self._sleep = sleep

    def request_headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.source_config.user_agent or self.settings.user_agent,
            "Accept": self.source_config.accept,
            "Accept-Language": self.source_config.accept_language or self.settings.accept_language,
        }
        headers.update(self.source_config.headers)
        return headers

    def run(self) -> RunSummary:
        started = time.monotonic()
        log_event(
            logger,
            logging.INFO,
            "run_started",
            source=self.source_config.name,
            workers=self.settings.workers,
            delay_seconds=self.settings.delay_seconds,
        )
        fetcher = Fetcher(
            headers=self.request_headers(),
            session=self._session,
            timeout_seconds=self.settings.timeout_seconds,
            max_attempts=self.settings.max_attempts,
            sleep=self._sleep,
        )
        try:
            source = self.registry.create_source(config=self.source_config, fetcher=fetcher)
            categories = self.discover(source)
            # The previous snapshot survives a failed discovery.
            self.sink.reset()

            handler = CatalogTaskHandler(
                source=source,
                collector=ListingCollector(source=source),
                normalizer=ProductNormalizer(
                    home_labels=self.source_config.home_labels or self.settings.home_labels,
                ),
                category_order=[category.name for category in categories],
            )
            scheduler = TaskScheduler(
                handler=handler,
                workers=self.settings.workers,
                delay_seconds=self.settings.delay_seconds,
                poll_interval_seconds=self.settings.poll_interval_seconds,
                sleep=self._sleep,
            )
            stats = scheduler.run(
                (PageTask(category=category) for category in categories),
                self._consume,
            )
            settled = self.sink.update(handler.settle)
            if settled:
                log_event(logger, logging.INFO, "shared_products_settled", products=settled)
            self.sink.close()
        finally:
            # A caller-supplied session stays open for the caller.
            if self._session is None:
                fetcher.close()

        summary = RunSummary(
            source=self.source_config.name,
            output_path=str(getattr(self.sink, "path", "")),
            categories=[category.name for category in categories],
            products_by_category=self.sink.counts_by_category(),
            total_products=self.sink.total,
            skipped_tasks=stats.skipped,
            duplicates_dropped=self.sink.duplicates_dropped,
            elapsed_seconds=time.monotonic() - started,
            errors=list(stats.errors),
        )
        log_event(
            logger,
            logging.INFO,
            "run_completed",
            source=summary.source,
            status=summary.status,
            total_products=summary.total_products,
            products_by_category=summary.products_by_category,
            skipped_tasks=summary.skipped_tasks,
            duplicates_dropped=summary.duplicates_dropped,
            elapsed_seconds=round(summary.elapsed_seconds, 3),
        )
        return summary

    def discover(self, source: CatalogSource) -> list[CatalogCategory]:
        try:
            categories = source.discover_categories()
        except (FetchError, ExtractionError) as exc:
            raise CategoryDiscoveryError(
                f"Category discovery failed for source '{source.name}': {exc}"
            ) from exc
        if not categories:
            raise CategoryDiscoveryError(f"No categories found for source '{source.name}'.")

        for category in categories:
            log_event(
                logger,
                logging.INFO,
                "category_discovered",
                source=source.name,
                category=category.name,
                endpoint=category.endpoint,
            )
        return categories

    def _consume(self, products: list[Product]) -> None:
        accepted = self.sink.add(products)
        if accepted == 0:
            return
        self.sink.flush()
        log_event(
            logger,
            logging.INFO,
            "products_written",
            accepted=accepted,
            total=self.sink.total,
        )
