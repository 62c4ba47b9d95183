"""
catalog/schemas package marker.
"""

from catalog.schemas.product import ProductRecord
from catalog.schemas.run_summary import RunSummaryResponse

__all__ = ["ProductRecord", "RunSummaryResponse"]
