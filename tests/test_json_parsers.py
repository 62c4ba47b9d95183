import pytest

from catalog.domain.catalog import CatalogCategory
from catalog.scraping.parsing import ExtractionError, StoreAPIParser


def _record(**overrides) -> dict:
    record = {
        "id": 501,
        "name": "Audífonos Bluetooth &amp; Micrófono",
        "permalink": "https://buytiti.example/producto/audifonos-bt/",
        "on_sale": True,
        "prices": {
            "price": "24900",
            "regular_price": "29900",
            "sale_price": "24900",
            "currency_minor_unit": 2,
        },
        "images": [
            {
                "src": "https://buytiti.example/uploads/audifonos.jpg",
                "srcset": (
                    "https://buytiti.example/uploads/audifonos-100x100.jpg 100w, "
                    "https://buytiti.example/uploads/audifonos-300x300.jpg 300w"
                ),
            }
        ],
        "categories": [{"id": 9, "name": "Audio"}, {"id": 12, "name": "Audífonos"}],
        "stock_availability": {"text": "", "class": "in-stock"},
    }
    record.update(overrides)
    return record


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class TestParseCategories:
    def test_keeps_root_categories_with_products(self) -> None:
        payload = [
            {"id": 1, "name": "Audio", "slug": "audio", "parent": 0, "count": 14},
            {"id": 2, "name": "Audífonos", "slug": "audifonos", "parent": 1, "count": 6},
            {"id": 3, "name": "Vacía", "slug": "vacia", "parent": 0, "count": 0},
            {"id": 4, "name": "Uncategorized", "slug": "uncategorized", "parent": 0, "count": 3},
            {"id": 5, "name": "", "slug": "smart-home", "parent": 0, "count": 2},
        ]

        categories = StoreAPIParser.parse_categories(payload, ignored_slugs=("uncategorized",))

        assert categories == [
            CatalogCategory(name="Audio", endpoint="audio"),
            CatalogCategory(name="Smart Home", endpoint="smart-home"),
        ]

    def test_non_array_payload_is_an_extraction_error(self) -> None:
        with pytest.raises(ExtractionError):
            StoreAPIParser.parse_categories({"code": "rest_no_route"})


# ---------------------------------------------------------------------------
# Listing records
# ---------------------------------------------------------------------------


class TestParseListing:
    def test_records_become_inline_entries(self) -> None:
        page = StoreAPIParser.parse_listing([_record(), _record(permalink="")], category="Audio")

        assert page.has_more is True
        assert len(page.entries) == 1
        entry = page.entries[0]
        assert entry.url == "https://buytiti.example/producto/audifonos-bt/"
        assert entry.category == "Audio"
        assert entry.thumbnail == "https://buytiti.example/uploads/audifonos-100x100.jpg"
        assert entry.inline is not None

    def test_empty_page_ends_pagination(self) -> None:
        page = StoreAPIParser.parse_listing([], category="Audio")

        assert page.entries == []
        assert page.has_more is False

    def test_error_object_is_an_extraction_error(self) -> None:
        with pytest.raises(ExtractionError):
            StoreAPIParser.parse_listing({"message": "invalid"}, category="Audio")


class TestParseRecord:
    def test_sale_record(self) -> None:
        raw = StoreAPIParser.parse_record(_record())

        assert raw.name == "Audífonos Bluetooth & Micrófono"
        assert raw.price_text == "24900"
        assert raw.regular_price_text == "29900"
        assert raw.sale_price_text == "24900"
        assert raw.minor_unit == 2
        assert raw.breadcrumbs == ("Audio", "Audífonos")
        assert raw.breadcrumbs_end_with_product is False
        assert raw.purchasable is True
        assert raw.out_of_stock is False
        assert raw.image == "https://buytiti.example/uploads/audifonos.jpg"

    def test_sale_price_ignored_when_not_on_sale(self) -> None:
        raw = StoreAPIParser.parse_record(_record(on_sale=False))

        assert raw.sale_price_text is None

    def test_stock_classes(self) -> None:
        out = StoreAPIParser.parse_record(_record(stock_availability={"class": "out-of-stock"}))
        unknown = StoreAPIParser.parse_record(_record(stock_availability=None))

        assert out.out_of_stock is True
        assert out.purchasable is False
        assert unknown.out_of_stock is False
        assert unknown.purchasable is False

    def test_missing_images_and_prices(self) -> None:
        raw = StoreAPIParser.parse_record(_record(images=[], prices=None))

        assert raw.image == ""
        assert raw.thumbnail == ""
        assert raw.price_text is None
        assert raw.minor_unit is None

    def test_srcset_url(self) -> None:
        srcset = "a.jpg 100w, b.jpg 300w"

        assert StoreAPIParser.srcset_url(srcset, "300w") == "b.jpg"
        assert StoreAPIParser.srcset_url(srcset, "600w") == ""
