from catalog.scraping.urls import absolute_url, canonical_url, strip_query, with_page


def test_absolute_url() -> None:
    base = "https://shop.example.mx/"

    assert absolute_url(base, "/shop/funda-1") == "https://shop.example.mx/shop/funda-1"
    assert absolute_url(base, "//cdn.example.mx/a.jpg") == "https://cdn.example.mx/a.jpg"
    assert absolute_url(base, "https://other.mx/x") == "https://other.mx/x"
    assert absolute_url(base, "  ") == ""


def test_canonical_url_ignores_case_query_and_trailing_slash() -> None:
    assert canonical_url("https://Shop.Example.mx/Shop/Funda-1/?ref=grid#top") == (
        "https://shop.example.mx/shop/funda-1"
    )


def test_strip_query() -> None:
    assert strip_query("https://shop.example.mx/shop?page=2#x") == "https://shop.example.mx/shop"


def test_with_page() -> None:
    assert with_page("https://shop.example.mx/shop/category/fundas-1", 1) == (
        "https://shop.example.mx/shop/category/fundas-1"
    )
    assert with_page("https://shop.example.mx/shop/category/fundas-1", 3) == (
        "https://shop.example.mx/shop/category/fundas-1?page=3"
    )
    assert with_page("https://shop.example.mx/shop?order=name", 2) == "https://shop.example.mx/shop?order=name&page=2"
