"""
JSON file sink for product snapshots.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from catalog.domain.catalog import Product
from catalog.schemas.product import ProductRecord
from catalog.scraping.storage.base import ProductSink, SinkWriteError


def serialize_products(products: list[Product]) -> bytes:
    """
    Render products as UTF-8, 4-space indented JSON with non-ASCII kept.
    """

    records = [ProductRecord.from_product(product).to_json_dict() for product in products]
    return json.dumps(records, indent=4, ensure_ascii=False).encode("utf-8")


class JsonFileSink(ProductSink):
    """
    Rewrites the whole output file on every flush via temp file + replace,
    so readers never observe a partially written snapshot.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)

    def _write(self, products: list[Product]) -> None:
        payload = serialize_products(products)
        directory = self.path.parent
        temp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self.path)
        except OSError as exc:
            if temp_name is not None and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise SinkWriteError(f"Unable to write products to {self.path}: {exc}") from exc
