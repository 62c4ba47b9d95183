"""
Normalization layer: raw extracted fields -> canonical Product.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from catalog.domain.catalog import ListingEntry, Product, RawDetail, StockState
from catalog.scraping.logging_utils import log_event
from catalog.scraping.parsing.rules import clean_text

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"
DEFAULT_HOME_LABELS = ("Home", "Inicio")
PRICE_CHARACTERS_RE = re.compile(r"[^\d.\-]")


def parse_price(text: str | None, minor_unit: int | None = None) -> float | None:
    """
    Parse price text into a non-negative amount rounded to cents.

    Thousands separators and currency symbols are dropped. With `minor_unit`
    the text is an integer in the minor currency unit (``"2700"`` with ``2``
    is ``27.0``). Returns None when nothing usable is found.
    """

    if text is None:
        return None
    cleaned = PRICE_CHARACTERS_RE.sub("", text.replace(",", ""))
    if not cleaned:
        return None
    try:
        if minor_unit is not None:
            value = int(cleaned) / (10**minor_unit)
        else:
            value = float(cleaned)
    except ValueError:
        log_event(logger, logging.WARNING, "price_unparseable", text=text, minor_unit=minor_unit)
        return None
    if value < 0:
        return None
    return round(value, 2)


class ProductNormalizer:
    """
    Resolve price, stock, category and image ambiguities into one Product.
    """

    def __init__(self, *, home_labels: Iterable[str] = DEFAULT_HOME_LABELS) -> None:
        self._home_labels = {label.casefold() for label in home_labels}

    def normalize(self, raw: RawDetail, entry: ListingEntry) -> Product:
        price, list_price = self.resolve_prices(raw)
        category, subcategories = self.resolve_categories(raw, entry)
        image, thumbnail = self.resolve_images(raw, entry)
        name = clean_text(raw.name)
        if not image:
            log_event(logger, logging.WARNING, "product_without_image", link=entry.url, name=name)

        return Product(
            name=name,
            price=price,
            list_price=list_price,
            on_sale=list_price > price,
            stock_state=self.resolve_stock(raw),
            image=image,
            thumbnail=thumbnail,
            link=entry.url,
            category=category,
            subcategories=subcategories,
        )

    @staticmethod
    def resolve_prices(raw: RawDetail) -> tuple[float, float]:
        """
        Return ``(effective price, list price)``.

        A sale price wins as the effective price; the list price is the larger
        of the effective and regular prices. Without any sale or regular price
        the list price equals the effective price.
        """

        price = parse_price(raw.price_text, raw.minor_unit)
        sale = parse_price(raw.sale_price_text, raw.minor_unit)
        regular = parse_price(raw.regular_price_text, raw.minor_unit)

        if sale is not None:
            effective = sale
        elif price is not None:
            effective = price
        else:
            effective = 0.0

        if regular is None:
            return effective, effective
        return effective, max(effective, regular)

    @staticmethod
    def resolve_stock(raw: RawDetail) -> StockState:
        if raw.out_of_stock:
            return StockState.OUT_OF_STOCK
        if raw.purchasable:
            return StockState.AVAILABLE
        return StockState.UNKNOWN

    def resolve_categories(self, raw: RawDetail, entry: ListingEntry) -> tuple[str, tuple[str, ...]]:
        trail = [
            label
            for label in (clean_text(item) for item in raw.breadcrumbs)
            if label and label.casefold() not in self._home_labels
        ]
        if raw.breadcrumbs_end_with_product and trail:
            trail = trail[:-1]

        category = clean_text(entry.category)
        if category:
            return category, tuple(trail) if trail else (category,)
        if trail:
            return trail[-1], tuple(trail)
        return DEFAULT_CATEGORY, (DEFAULT_CATEGORY,)

    @staticmethod
    def resolve_images(raw: RawDetail, entry: ListingEntry) -> tuple[str, str]:
        thumbnail = entry.thumbnail or raw.thumbnail
        image = raw.image or thumbnail
        return image, thumbnail or image
