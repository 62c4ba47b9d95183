"""
Parsing layer for JSON product-listing APIs (WooCommerce Store API shape).
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from catalog.domain.catalog import CatalogCategory, ListingEntry, RawDetail
from catalog.scraping.parsing.html_parsers import StorefrontHTMLParser
from catalog.scraping.parsing.rules import ExtractionError, clean_text
from catalog.scraping.types import ListingPage

THUMBNAIL_WIDTH = "100w"
IN_STOCK_CLASSES = {"in-stock", "instock", "available-on-backorder", "onbackorder"}
OUT_OF_STOCK_CLASSES = {"out-of-stock", "outofstock"}


class StoreAPIParser:
    """
    Role-specific extraction for JSON-array-of-records payloads.
    """

    @classmethod
    def parse_categories(
        cls,
        payload: Any,
        *,
        ignored_slugs: Collection[str] = (),
    ) -> list[CatalogCategory]:
        """
        Root categories (no parent) that hold at least one product.
        """

        records = cls._records(payload, role="category index")
        ignored = {slug.lower() for slug in ignored_slugs}
        categories: list[CatalogCategory] = []
        for record in records:
            slug = str(record.get("slug") or "").strip()
            if not slug or slug.lower() in ignored:
                continue
            if _as_int(record.get("parent")) != 0 or _as_int(record.get("count")) <= 0:
                continue
            name = clean_text(str(record.get("name") or "")) or StorefrontHTMLParser.slug_to_label(slug)
            categories.append(CatalogCategory(name=name, endpoint=slug))
        return categories

    @classmethod
    def parse_listing(cls, payload: Any, *, category: str) -> ListingPage:
        """
        Every record already carries its detail fields, so entries are inline.
        An empty page ends the category.
        """

        records = cls._records(payload, role="listing page")
        entries: list[ListingEntry] = []
        for record in records:
            link = str(record.get("permalink") or "").strip()
            if not link:
                continue
            detail = cls.parse_record(record)
            entries.append(
                ListingEntry(
                    url=link,
                    thumbnail=detail.thumbnail,
                    category=category,
                    inline=detail,
                )
            )
        return ListingPage(entries=entries, has_more=bool(records))

    @classmethod
    def parse_record(cls, record: dict[str, Any]) -> RawDetail:
        prices = record.get("prices") if isinstance(record.get("prices"), dict) else {}
        on_sale = bool(record.get("on_sale"))
        sale_price = _as_text(prices.get("sale_price")) if on_sale else None

        images = record.get("images") if isinstance(record.get("images"), list) else []
        first_image = images[0] if images and isinstance(images[0], dict) else {}
        image = _as_text(first_image.get("src")) or ""
        thumbnail = cls.srcset_url(_as_text(first_image.get("srcset")) or "", THUMBNAIL_WIDTH)

        categories = record.get("categories") if isinstance(record.get("categories"), list) else []
        labels = tuple(
            clean_text(str(item.get("name") or ""))
            for item in categories
            if isinstance(item, dict) and clean_text(str(item.get("name") or ""))
        )

        availability = record.get("stock_availability")
        stock_class = ""
        if isinstance(availability, dict):
            stock_class = str(availability.get("class") or "").strip().lower()
        purchasable = stock_class in IN_STOCK_CLASSES
        if not stock_class and "is_in_stock" in record:
            purchasable = bool(record.get("is_in_stock"))

        return RawDetail(
            name=clean_text(str(record.get("name") or "")),
            price_text=_as_text(prices.get("price")),
            regular_price_text=_as_text(prices.get("regular_price")),
            sale_price_text=sale_price,
            minor_unit=_as_int(prices.get("currency_minor_unit"), default=None),
            breadcrumbs=labels,
            breadcrumbs_end_with_product=False,
            out_of_stock=stock_class in OUT_OF_STOCK_CLASSES,
            purchasable=purchasable,
            image=image,
            thumbnail=thumbnail,
        )

    @staticmethod
    def srcset_url(srcset: str, width: str) -> str:
        """
        URL for one width descriptor of a srcset, e.g. ``"100w"``.
        """

        for candidate in srcset.split(","):
            parts = candidate.strip().split()
            if len(parts) == 2 and parts[1] == width:
                return parts[0]
        return ""

    @staticmethod
    def _records(payload: Any, *, role: str) -> list[dict[str, Any]]:
        if not isinstance(payload, list):
            raise ExtractionError(f"Expected a JSON array for {role}, got {type(payload).__name__}.")
        return [record for record in payload if isinstance(record, dict)]


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _as_int(value: Any, default: int | None = 0) -> int | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
