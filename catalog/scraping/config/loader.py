"""
Environment + JSON config loader for catalog scraping.
"""

from __future__ import annotations

import json
from functools import lru_cache

from catalog.config import (
    get_bool_env,
    get_float_env,
    get_int_env,
    get_list_env,
    get_str_env,
    resolve_path,
)
from catalog.scraping.config.models import CatalogScrapingSettings, CatalogSourceConfig

DEFAULT_USER_AGENT = "CatalogScraper/1.0"
DEFAULT_HOME_LABELS = ("Home", "Inicio")


@lru_cache(maxsize=1)
def get_catalog_scraping_settings() -> CatalogScrapingSettings:
    """
    Return cached scraper settings from environment variables.
    """

    return CatalogScrapingSettings(
        sources_path=str(
            resolve_path(
                get_str_env(
                    "CATALOG_SCRAPE_SOURCES_PATH",
                    "catalog/scraping/config/sources.json",
                )
            )
        ),
        default_source=get_str_env("CATALOG_SCRAPE_SOURCE", "my-shop"),
        output_path=get_str_env("CATALOG_SCRAPE_OUTPUT", "productos.json"),
        delay_seconds=max(0.0, get_float_env("CATALOG_SCRAPE_DELAY_SECONDS", 0.5)),
        workers=max(1, get_int_env("CATALOG_SCRAPE_WORKERS", 3)),
        verbose=get_bool_env("CATALOG_SCRAPE_VERBOSE", False),
        timeout_seconds=max(1.0, get_float_env("CATALOG_SCRAPE_TIMEOUT_SECONDS", 30.0)),
        max_attempts=max(1, get_int_env("CATALOG_SCRAPE_MAX_ATTEMPTS", 3)),
        user_agent=get_str_env("CATALOG_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        accept_language=get_str_env("CATALOG_SCRAPE_ACCEPT_LANGUAGE", "es-MX,es;q=0.9"),
        poll_interval_seconds=max(
            0.01,
            get_float_env("CATALOG_SCRAPE_POLL_INTERVAL_SECONDS", 0.2),
        ),
        home_labels=get_list_env("CATALOG_SCRAPE_HOME_LABELS", DEFAULT_HOME_LABELS),
    )


def load_source_configs(*, config_path: str) -> list[CatalogSourceConfig]:
    """
    Load storefront source configurations from a JSON file.
    """

    path = resolve_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog sources file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    sources = raw_data.get("sources", [])
    if not isinstance(sources, list):
        raise ValueError("Invalid sources config: 'sources' must be a list.")

    parsed: list[CatalogSourceConfig] = []
    for entry in sources:
        if not isinstance(entry, dict):
            continue

        name = str(entry.get("name", "")).strip()
        base_url = str(entry.get("base_url", "")).strip()
        categories_path = str(entry.get("categories_path", "")).strip()
        if not name or not base_url or not categories_path:
            continue

        parsed.append(
            CatalogSourceConfig(
                name=name,
                source_type=_normalize_source_type(entry.get("source_type")),
                base_url=base_url.rstrip("/"),
                categories_path=categories_path,
                listing_path=_optional_str(entry.get("listing_path")) or "",
                per_page=max(1, _optional_int(entry.get("per_page")) or 20),
                enabled=_optional_bool(entry.get("enabled"), True),
                user_agent=_optional_str(entry.get("user_agent")),
                accept=_optional_str(entry.get("accept")) or "text/html",
                accept_language=_optional_str(entry.get("accept_language")),
                headers=_normalize_headers(entry.get("headers", {})),
                ignored_category_slugs=_normalize_strings(entry.get("ignored_category_slugs", [])),
                home_labels=_normalize_strings(entry.get("home_labels", [])),
                out_of_stock_markers=_normalize_strings(entry.get("out_of_stock_markers", [])),
            )
        )

    return parsed


def select_source(
    *,
    configs: list[CatalogSourceConfig],
    name: str,
) -> CatalogSourceConfig:
    """
    Return the enabled source called `name` (case-insensitive).
    """

    wanted = name.strip().lower()
    for config in configs:
        if config.enabled and config.name.lower() == wanted:
            return config
    available = ", ".join(sorted(config.name for config in configs if config.enabled))
    raise ValueError(f"Unknown catalog source '{name}'. Available sources: {available}.")


def _normalize_source_type(value: object) -> str:
    source_type = _optional_str(value) or "storefront_html"
    # "module.path:ClassName" keeps its case for importing.
    return source_type if ":" in source_type else source_type.lower()


def _normalize_headers(headers: object) -> dict[str, str]:
    if not isinstance(headers, dict):
        return {}

    normalized: dict[str, str] = {}
    for key, value in headers.items():
        if not isinstance(key, str) or not isinstance(value, str):
            continue
        if key.strip() and value.strip():
            normalized[key.strip()] = value.strip()
    return normalized


def _normalize_strings(values: object) -> tuple[str, ...]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, list):
        return ()
    return tuple(item.strip() for item in values if isinstance(item, str) and item.strip())


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
