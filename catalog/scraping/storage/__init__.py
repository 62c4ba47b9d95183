"""
Product sinks.
"""

from catalog.scraping.storage.base import ProductSink, SinkWriteError, product_sort_key
from catalog.scraping.storage.json_storage import JsonFileSink, serialize_products

__all__ = [
    "JsonFileSink",
    "ProductSink",
    "SinkWriteError",
    "product_sort_key",
    "serialize_products",
]
