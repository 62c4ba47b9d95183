"""
Base product sink: run-wide dedup, per-category counts and ordered output.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Callable, Iterable

from catalog.domain.catalog import Product
from catalog.scraping.logging_utils import log_event
from catalog.scraping.urls import canonical_url

logger = logging.getLogger(__name__)


class SinkWriteError(RuntimeError):
    """
    Raised when the snapshot cannot be persisted.
    """


def product_sort_key(product: Product) -> tuple[str, str, str]:
    return (product.category, product.name, product.link)


class ProductSink(ABC):
    """
    Accumulates products from a single consumer thread.

    The first product seen for a canonical link wins; later ones are counted
    as duplicates and dropped.
    """

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}
        self._duplicates = 0

    @property
    def duplicates_dropped(self) -> int:
        return self._duplicates

    @property
    def total(self) -> int:
        return len(self._products)

    def counts_by_category(self) -> dict[str, int]:
        counts = Counter(product.category for product in self._products.values())
        return dict(sorted(counts.items()))

    def add(self, products: Iterable[Product]) -> int:
        """
        Accept a batch and return how many products were new.
        """

        accepted = 0
        for product in products:
            key = canonical_url(product.link)
            if key in self._products:
                self._duplicates += 1
                log_event(logger, logging.DEBUG, "duplicate_product_dropped", link=product.link)
                continue
            self._products[key] = product
            accepted += 1
        return accepted

    def update(self, settle: Callable[[Product], Product]) -> int:
        """
        Replace every product with `settle(product)`; returns how many changed.
        """

        changed = 0
        for key, product in list(self._products.items()):
            settled = settle(product)
            if settled != product:
                self._products[key] = settled
                changed += 1
        return changed

    def sorted_products(self) -> list[Product]:
        return sorted(self._products.values(), key=product_sort_key)

    def reset(self) -> None:
        """
        Forget accumulated products and persist an empty snapshot.
        """

        self._products.clear()
        self._duplicates = 0
        self._write([])

    def flush(self) -> None:
        products = self.sorted_products()
        self._write(products)
        log_event(logger, logging.DEBUG, "products_written", total=len(products))

    def close(self) -> None:
        self.flush()

    @abstractmethod
    def _write(self, products: list[Product]) -> None:
        """
        Persist the full ordered snapshot. Failures raise SinkWriteError.
        """
