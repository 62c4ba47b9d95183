"""
catalog/domain/run_summary.py

Summary model for one catalog scrape run.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RunSummary:
    """
    Outcome of one completed catalog scrape.
    """

    source: str
    output_path: str
    categories: list[str]
    products_by_category: dict[str, int]
    total_products: int
    skipped_tasks: int
    duplicates_dropped: int
    elapsed_seconds: float
    errors: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.skipped_tasks == 0:
            return "success"
        return "partial_success" if self.total_products > 0 else "failed"
