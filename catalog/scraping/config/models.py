"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CatalogSourceConfig:
    """
    One storefront the catalog scraper knows how to walk.
    """

    name: str
    source_type: str
    base_url: str
    categories_path: str
    listing_path: str = ""
    per_page: int = 20
    enabled: bool = True
    user_agent: str | None = None
    accept: str = "text/html"
    accept_language: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    ignored_category_slugs: tuple[str, ...] = ()
    home_labels: tuple[str, ...] = ()
    out_of_stock_markers: tuple[str, ...] = ()

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass(frozen=True)
class CatalogScrapingSettings:
    """
    Runtime settings for a catalog scrape.
    """

    sources_path: str
    default_source: str
    output_path: str
    delay_seconds: float
    workers: int
    verbose: bool
    timeout_seconds: float
    max_attempts: int
    user_agent: str
    accept_language: str
    poll_interval_seconds: float
    home_labels: tuple[str, ...]
