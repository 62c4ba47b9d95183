"""
Catalog source class registry and factory.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping

from catalog.scraping.config.models import CatalogSourceConfig
from catalog.scraping.fetcher import Fetcher
from catalog.scraping.sources import CatalogSource, StoreAPISource, StorefrontHTMLSource


class SourceRegistry:
    """
    Source registry supporting built-ins and dynamic import paths.
    """

    def __init__(self, registrations: Mapping[str, type[CatalogSource]] | None = None) -> None:
        builtins: dict[str, type[CatalogSource]] = {
            "storefront_html": StorefrontHTMLSource,
            "store_api": StoreAPISource,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins

    def register(self, *, source_type: str, source_class: type[CatalogSource]) -> None:
        self._registrations[source_type.strip().lower()] = source_class

    def create_source(self, *, config: CatalogSourceConfig, fetcher: Fetcher) -> CatalogSource:
        source_class = self._resolve_source_class(config)
        return source_class(config=config, fetcher=fetcher)

    def _resolve_source_class(self, config: CatalogSourceConfig) -> type[CatalogSource]:
        if ":" in config.source_type:
            return self._load_dynamic_class(config.source_type)

        resolved = self._registrations.get(config.source_type)
        if resolved is None:
            allowed = ", ".join(sorted(self._registrations.keys()))
            raise ValueError(
                f"Unknown source_type='{config.source_type}' for source='{config.name}'. "
                f"Allowed types: {allowed}."
            )
        return resolved

    @staticmethod
    def _load_dynamic_class(path: str) -> type[CatalogSource]:
        module_path, class_name = path.split(":", 1)
        module = importlib.import_module(module_path)
        loaded = getattr(module, class_name, None)
        if loaded is None:
            raise ValueError(f"Unable to resolve source class '{path}'.")
        if not isinstance(loaded, type) or not issubclass(loaded, CatalogSource):
            raise ValueError(f"Class '{path}' must inherit from CatalogSource.")
        return loaded
