"""
catalog/domain/catalog.py

Domain models shared by the catalog acquisition pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class StockState(str, Enum):
    """
    Normalized availability of one product.
    """

    AVAILABLE = "Available"
    OUT_OF_STOCK = "OutOfStock"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CatalogCategory:
    """
    One top-level grouping of products discovered at run start.

    `endpoint` is whatever the source needs to address the category: an
    absolute listing URL for HTML storefronts, a slug for the JSON API.
    """

    name: str
    endpoint: str


@dataclass(frozen=True)
class RawDetail:
    """
    Fields extracted from a detail page (or an inline API record) before
    normalization. Text fields are left exactly as the source rendered them.
    """

    name: str = ""
    price_text: str | None = None
    regular_price_text: str | None = None
    sale_price_text: str | None = None
    minor_unit: int | None = None
    breadcrumbs: tuple[str, ...] = ()
    breadcrumbs_end_with_product: bool = True
    out_of_stock: bool = False
    purchasable: bool = False
    image: str = ""
    thumbnail: str = ""


@dataclass(frozen=True)
class ListingEntry:
    """
    Lightweight product reference found on a category listing page.
    """

    url: str
    thumbnail: str = ""
    category: str = ""
    inline: RawDetail | None = None


@dataclass(frozen=True)
class DetailTask:
    """
    Fetch and normalize one product detail page.
    """

    entry: ListingEntry


@dataclass(frozen=True)
class PageTask:
    """
    Fetch one listing page of a category.
    """

    category: CatalogCategory
    page_number: int = 1

    def next_page(self) -> "PageTask":
        return PageTask(category=self.category, page_number=self.page_number + 1)


ScrapeTask = Union[DetailTask, PageTask]


@dataclass(frozen=True)
class Product:
    """
    Canonical product record produced by the normalizer.
    """

    name: str
    price: float
    list_price: float
    on_sale: bool
    stock_state: StockState
    image: str
    thumbnail: str
    link: str
    category: str
    subcategories: tuple[str, ...] = field(default_factory=tuple)
