"""
catalog/domain package marker.
"""

from catalog.domain.catalog import (
    CatalogCategory,
    DetailTask,
    ListingEntry,
    PageTask,
    Product,
    RawDetail,
    ScrapeTask,
    StockState,
)
from catalog.domain.run_summary import RunSummary

__all__ = [
    "CatalogCategory",
    "DetailTask",
    "ListingEntry",
    "PageTask",
    "Product",
    "RawDetail",
    "RunSummary",
    "ScrapeTask",
    "StockState",
]
