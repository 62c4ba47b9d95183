"""
catalog/schemas/run_summary.py

Response schema printed by the CLI after a catalog scrape.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from catalog.domain.run_summary import RunSummary


class RunSummaryResponse(BaseModel):
    """
    Serializable view of one run summary.
    """

    source: str
    output_path: str
    status: str
    categories: list[str] = Field(default_factory=list)
    products_by_category: dict[str, int] = Field(default_factory=dict)
    total_products: int = Field(..., ge=0)
    skipped_tasks: int = Field(..., ge=0)
    duplicates_dropped: int = Field(..., ge=0)
    elapsed_seconds: float = Field(..., ge=0.0)
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: RunSummary) -> "RunSummaryResponse":
        return cls(
            source=summary.source,
            output_path=summary.output_path,
            status=summary.status,
            categories=summary.categories,
            products_by_category=summary.products_by_category,
            total_products=summary.total_products,
            skipped_tasks=summary.skipped_tasks,
            duplicates_dropped=summary.duplicates_dropped,
            elapsed_seconds=round(summary.elapsed_seconds, 3),
            errors=summary.errors,
        )
