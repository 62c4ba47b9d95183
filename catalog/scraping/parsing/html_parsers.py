"""
BeautifulSoup-based parsing layer for server-rendered storefront pages.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from urllib.parse import urlsplit

from bs4 import Tag

from catalog.domain.catalog import CatalogCategory, ListingEntry, RawDetail
from catalog.scraping.parsing.rules import Document, FieldRule, clean_text, first_match
from catalog.scraping.types import ListingPage
from catalog.scraping.urls import absolute_url, strip_query

CATEGORY_PATH_RE = re.compile(r"^/shop/category/([^/?#]+)")
PRODUCT_PATH_RE = re.compile(r"^/shop/[^?#]+-\d+$")
EXCLUDED_PRODUCT_PATHS = ("/category/", "/cart", "/wishlist", "/page/")
PRODUCT_IMAGE_MARKER = "/web/image/product"
NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
VISIBLE_PRICE_RE = re.compile(r"\$\s*(\d[\d,]*(?:\.\d+)?)")
THUMBNAIL_SEARCH_DEPTH = 4

DEFAULT_OUT_OF_STOCK_MARKERS = (
    "Esta combinación no existe",
    "This combination does not exist",
)
ADD_TO_CART_SELECTOR = "#add_to_cart, [name='add_to_cart']"


def _text(node: Tag | None) -> str | None:
    if node is None:
        return None
    return node.get_text(" ", strip=True)


def _number(value: str | None) -> str | None:
    if not value:
        return None
    match = NUMBER_RE.search(value)
    return match.group(0) if match else None


def _image_src(img: Tag) -> str:
    for attribute in ("src", "data-src"):
        value = img.get(attribute)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _product_image(node: Tag) -> str | None:
    for img in node.find_all("img"):
        src = _image_src(img)
        if PRODUCT_IMAGE_MARKER in src:
            return src
    return None


def _product_image_attr(img: Tag | None) -> str | None:
    if img is None:
        return None
    return _image_src(img) or None


def _item_name(document: Document) -> str | None:
    for node in document.soup.select('[itemprop="name"]'):
        if node.find_parent(class_="breadcrumb") is not None:
            continue
        if node.name == "meta":
            return node.get("content")
        return _text(node)
    return None


def _item_price(document: Document) -> str | None:
    node = document.soup.select_one('[itemprop="price"]')
    if node is None:
        return None
    content = node.get("content")
    if isinstance(content, str) and content.strip():
        return _number(content)
    return _number(node.get_text(" ", strip=True))


def _visible_price(document: Document) -> str | None:
    match = VISIBLE_PRICE_RE.search(document.soup.get_text(" "))
    return match.group(1) if match else None


def _og_image(document: Document) -> str | None:
    node = document.soup.select_one('meta[property="og:image"]')
    return node.get("content") if node is not None else None


NAME_RULES: tuple[FieldRule[Document], ...] = (
    FieldRule("heading_itemprop_name", lambda d: _text(d.soup.select_one('h1[itemprop="name"]'))),
    FieldRule("itemprop_name", _item_name),
    FieldRule("heading", lambda d: _text(d.soup.find("h1"))),
)

PRICE_RULES: tuple[FieldRule[Document], ...] = (
    FieldRule("itemprop_price", _item_price),
    FieldRule("currency_value", lambda d: _number(_text(d.soup.select_one(".oe_price .oe_currency_value")))),
    FieldRule("visible_currency_text", _visible_price),
)

LIST_PRICE_RULES: tuple[FieldRule[Document], ...] = (
    FieldRule(
        "default_price_value",
        lambda d: _number(_text(d.soup.select_one(".oe_default_price .oe_currency_value"))),
    ),
    FieldRule("default_price_text", lambda d: _number(_text(d.soup.select_one(".oe_default_price")))),
)

IMAGE_RULES: tuple[FieldRule[Document], ...] = (
    FieldRule("itemprop_image", lambda d: _product_image_attr(d.soup.select_one('img[itemprop="image"]'))),
    FieldRule("product_image", lambda d: _product_image(d.soup)),
    FieldRule("og_image", _og_image),
)


class StorefrontHTMLParser:
    """
    Role-specific extraction for HTML storefront pages (category index,
    listing page, detail page). Pure: no network, no state.
    """

    @classmethod
    def parse_categories(cls, content: str, *, base_url: str) -> list[CatalogCategory]:
        """
        Categories from the shop sidebar, trying each strategy in priority order.
        """

        document = Document.parse(content)
        strategies: Sequence[Callable[[Document, str], list[CatalogCategory]]] = (
            cls._labelled_categories,
            cls._anchor_categories,
            cls._slug_categories,
        )
        for strategy in strategies:
            categories = strategy(document, base_url)
            if categories:
                return categories
        return []

    @classmethod
    def parse_listing(
        cls,
        content: str,
        *,
        base_url: str,
        category: str,
        page_number: int,
    ) -> ListingPage:
        document = Document.parse(content)
        entries: dict[str, ListingEntry] = {}
        for anchor in document.soup.find_all("a", href=True):
            path = cls._product_path(anchor["href"], base_url)
            if path is None:
                continue
            url = absolute_url(base_url, path)
            known = entries.get(url)
            if known is not None and known.thumbnail:
                continue
            thumbnail = cls._nearby_thumbnail(anchor, path, base_url)
            entries[url] = ListingEntry(
                url=url,
                thumbnail=absolute_url(base_url, thumbnail) if thumbnail else "",
                category=category,
            )
        return ListingPage(
            entries=list(entries.values()),
            has_more=cls.has_next_page(content, page_number),
        )

    @classmethod
    def parse_detail(
        cls,
        content: str,
        *,
        base_url: str,
        out_of_stock_markers: Sequence[str] = DEFAULT_OUT_OF_STOCK_MARKERS,
    ) -> RawDetail:
        document = Document.parse(content)
        folded = content.casefold()
        image = first_match(IMAGE_RULES, document) or ""
        return RawDetail(
            name=first_match(NAME_RULES, document) or "",
            price_text=first_match(PRICE_RULES, document),
            regular_price_text=first_match(LIST_PRICE_RULES, document),
            breadcrumbs=cls.breadcrumbs(document),
            breadcrumbs_end_with_product=True,
            out_of_stock=any(marker.casefold() in folded for marker in out_of_stock_markers),
            purchasable=document.soup.select_one(ADD_TO_CART_SELECTOR) is not None,
            image=absolute_url(base_url, image),
        )

    @staticmethod
    def breadcrumbs(document: Document) -> tuple[str, ...]:
        labels: list[str] = []
        for item in document.soup.select("li.breadcrumb-item"):
            label = clean_text(item.get_text(" ", strip=True))
            if label:
                labels.append(label)
        return tuple(labels)

    @staticmethod
    def has_next_page(content: str, page_number: int) -> bool:
        pattern = rf"page[=/]{page_number + 1}(?!\d)"
        return re.search(pattern, content) is not None

    @staticmethod
    def slug_to_label(slug: str) -> str:
        """
        Human label from a category slug: ``"cell-phones-12"`` -> ``"Cell Phones"``.
        """

        parts = [part for part in re.split(r"[-_]+", slug.strip("/").split("/")[-1]) if part]
        if len(parts) >= 2 and parts[-1].isdigit():
            parts = parts[:-1]
        return " ".join(part.capitalize() for part in parts)

    @classmethod
    def _labelled_categories(cls, document: Document, base_url: str) -> list[CatalogCategory]:
        found: dict[str, CatalogCategory] = {}
        for node in document.soup.select("[data-link-href]"):
            path = cls._category_path(node.get("data-link-href", ""), base_url)
            label = node.find("label")
            if path is None or label is None:
                continue
            name = clean_text(label.get_text(" ", strip=True))
            if name and name not in found:
                found[name] = CatalogCategory(name=name, endpoint=absolute_url(base_url, path))
        return list(found.values())

    @classmethod
    def _anchor_categories(cls, document: Document, base_url: str) -> list[CatalogCategory]:
        found: dict[str, CatalogCategory] = {}
        for anchor in document.soup.find_all("a", href=True):
            path = cls._category_path(anchor["href"], base_url)
            if path is None:
                continue
            name = clean_text(anchor.get_text(" ", strip=True))
            if name and name not in found:
                found[name] = CatalogCategory(name=name, endpoint=absolute_url(base_url, path))
        return list(found.values())

    @classmethod
    def _slug_categories(cls, document: Document, base_url: str) -> list[CatalogCategory]:
        found: dict[str, CatalogCategory] = {}
        for anchor in document.soup.find_all("a", href=True):
            path = cls._category_path(anchor["href"], base_url)
            if path is None:
                continue
            name = cls.slug_to_label(path)
            if name and name not in found:
                found[name] = CatalogCategory(name=name, endpoint=absolute_url(base_url, path))
        return list(found.values())

    @staticmethod
    def _local_path(href: str, base_url: str) -> str | None:
        parts = urlsplit(href.strip())
        if parts.netloc and parts.netloc.lower() != urlsplit(base_url).netloc.lower():
            return None
        return parts.path or None

    @classmethod
    def _category_path(cls, href: object, base_url: str) -> str | None:
        if not isinstance(href, str):
            return None
        path = cls._local_path(href, base_url)
        if path is None or CATEGORY_PATH_RE.match(path) is None:
            return None
        return strip_query(path)

    @classmethod
    def _product_path(cls, href: object, base_url: str) -> str | None:
        if not isinstance(href, str):
            return None
        path = cls._local_path(href, base_url)
        if path is None or PRODUCT_PATH_RE.match(path) is None:
            return None
        if any(excluded in path for excluded in EXCLUDED_PRODUCT_PATHS):
            return None
        return path

    @classmethod
    def _nearby_thumbnail(cls, anchor: Tag, path: str, base_url: str) -> str:
        node: Tag | None = anchor
        for _ in range(THUMBNAIL_SEARCH_DEPTH + 1):
            if node is None:
                break
            # Past the product card: images here may belong to a neighbour.
            if node is not anchor and cls._lists_other_products(node, path, base_url):
                break
            src = _product_image(node)
            if src:
                return src
            node = node.parent
        return ""

    @classmethod
    def _lists_other_products(cls, node: Tag, path: str, base_url: str) -> bool:
        for other in node.find_all("a", href=True):
            other_path = cls._product_path(other["href"], base_url)
            if other_path is not None and other_path != path:
                return True
        return False
