import json
import random
import threading
import time
from urllib.parse import urlencode

import pytest
import requests

from catalog.scraping.config.models import CatalogScrapingSettings, CatalogSourceConfig

BASE_URL = "https://shop.example.mx"
_MISSING = object()


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", payload: object = _MISSING) -> None:
        self.status_code = status_code
        self.text = text if payload is _MISSING else json.dumps(payload)
        self._payload = payload

    def json(self) -> object:
        if self._payload is not _MISSING:
            return self._payload
        return json.loads(self.text)


def route_key(url: str, params: dict | None = None) -> str:
    if not params:
        return url
    return f"{url}?{urlencode(sorted(params.items()))}"


class FakeSession:
    """
    Thread-safe stand-in for requests.Session.

    `jitter` adds a random delay of up to that many seconds per request so
    concurrent workers finish in varying order.

    Each route holds a list of responses; the last one repeats. An entry may be
    an exception instance, which is raised instead of returned. Unknown routes
    answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[object]] = {}
        self.calls: list[dict[str, object]] = []
        self.closed = False
        self.jitter = 0.0
        self._lock = threading.Lock()

    def add(self, url: str, *responses: object, params: dict | None = None) -> None:
        self.routes[route_key(url, params)] = list(responses)

    def add_html(self, url: str, text: str, params: dict | None = None) -> None:
        self.add(url, FakeResponse(text=text), params=params)

    def add_json(self, url: str, payload: object, params: dict | None = None) -> None:
        self.add(url, FakeResponse(payload=payload), params=params)

    def get(self, url, params=None, headers=None, timeout=None):
        if self.jitter:
            time.sleep(random.random() * self.jitter)
        key = route_key(url, params)
        with self._lock:
            self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout, "key": key})
            responses = self.routes.get(key)
            if not responses:
                return FakeResponse(status_code=404, text="not found")
            response = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def count(self, url: str, params: dict | None = None) -> int:
        key = route_key(url, params)
        with self._lock:
            return sum(1 for call in self.calls if call["key"] == key)

    def close(self) -> None:
        self.closed = True


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []
        self._lock = threading.Lock()

    def __call__(self, seconds: float) -> None:
        with self._lock:
            self.calls.append(seconds)


def category_index_html(categories: dict[str, str]) -> str:
    items = "".join(
        f'<li data-link-href="{path}"><input type="radio"/><label>{name}</label></li>'
        for name, path in categories.items()
    )
    return f"<html><body><ul class='categories'>{items}</ul></body></html>"


def listing_html(product_paths: list[str], *, next_page: int | None = None) -> str:
    cards = "".join(
        f'<div class="oe_product"><a href="{path}"><img src="/web/image/product.template/{index}/image_256"/></a>'
        f'<a href="{path}">Item {index}</a></div>'
        for index, path in enumerate(product_paths, start=1)
    )
    pager = f'<ul class="pagination"><a href="/shop?page={next_page}">Next</a></ul>' if next_page else ""
    return f"<html><body><div id='products_grid'>{cards}</div>{pager}</body></html>"


def detail_html(
    name: str,
    price: str,
    *,
    list_price: str | None = None,
    breadcrumbs: tuple[str, ...] = (),
    add_to_cart: bool = True,
    out_of_stock: bool = False,
    image: str = "/web/image/product.template/1/image_1024",
) -> str:
    crumbs = "".join(f'<li class="breadcrumb-item"><a href="#">{crumb}</a></li>' for crumb in breadcrumbs)
    default_price = (
        f'<span class="oe_default_price">$ <span class="oe_currency_value">{list_price}</span></span>'
        if list_price
        else ""
    )
    cart = '<a id="add_to_cart" href="#">Add to cart</a>' if add_to_cart else ""
    stock = "<p>Esta combinación no existe.</p>" if out_of_stock else ""
    return (
        "<html><body>"
        f'<ol class="breadcrumb">{crumbs}</ol>'
        f'<h1 itemprop="name">{name}</h1>'
        f'<img itemprop="image" src="{image}"/>'
        f'<div class="product_price"><span class="oe_price">$ <span class="oe_currency_value">{price}</span></span>'
        f"{default_price}</div>"
        f"{cart}{stock}"
        "</body></html>"
    )


def make_settings(**overrides: object) -> CatalogScrapingSettings:
    values: dict[str, object] = {
        "sources_path": "catalog/scraping/config/sources.json",
        "default_source": "test-shop",
        "output_path": "productos.json",
        "delay_seconds": 0.0,
        "workers": 3,
        "verbose": False,
        "timeout_seconds": 5.0,
        "max_attempts": 3,
        "user_agent": "CatalogScraper/1.0",
        "accept_language": "es-MX,es;q=0.9",
        "poll_interval_seconds": 0.01,
        "home_labels": ("Home", "Inicio"),
    }
    values.update(overrides)
    return CatalogScrapingSettings(**values)  # type: ignore[arg-type]


def html_source_config(**overrides: object) -> CatalogSourceConfig:
    values: dict[str, object] = {
        "name": "test-shop",
        "source_type": "storefront_html",
        "base_url": BASE_URL,
        "categories_path": "/shop",
        "user_agent": "TestShopScraper/1.0",
    }
    values.update(overrides)
    return CatalogSourceConfig(**values)  # type: ignore[arg-type]


def api_source_config(**overrides: object) -> CatalogSourceConfig:
    values: dict[str, object] = {
        "name": "test-api",
        "source_type": "store_api",
        "base_url": BASE_URL,
        "categories_path": "/wp-json/wc/store/v1/products/categories",
        "listing_path": "/wp-json/wc/store/v1/products",
        "per_page": 2,
        "accept": "application/json",
        "ignored_category_slugs": ("uncategorized",),
    }
    values.update(overrides)
    return CatalogSourceConfig(**values)  # type: ignore[arg-type]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection reset by peer")
