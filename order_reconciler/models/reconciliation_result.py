from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .cell import CellValue, cell_text
from .output import OutputRow, OutputTable

"""Reconciliation result models.

Summary aggregates the observations of a single run. A given order row lands
in at most one of: emitted, not found, struck through, included.
"""

__all__ = [
    "SkippedRowInfo",
    "FlaggedRowInfo",
    "DescriptionMismatch",
    "TextValueInfo",
    "MissingValueInfo",
    "UntouchedCatalogRows",
    "Summary",
    "ReconciliationResult",
]


@dataclass(frozen=True)
class SkippedRowInfo:
    display_row: int
    article: str  # constructed/corrected code or "N/A"
    reason: str


@dataclass(frozen=True)
class FlaggedRowInfo:
    code: str
    cell: str  # A1 reference in the order sheet


@dataclass(frozen=True)
class DescriptionMismatch:
    code: str
    catalog_description: str
    order_description: str


@dataclass(frozen=True)
class TextValueInfo:
    code: str
    field: str  # "quantity" | "unit_price"
    original_value: str


@dataclass(frozen=True)
class MissingValueInfo:
    code: str
    field: str


@dataclass(frozen=True)
class UntouchedCatalogRows:
    headers: tuple[str, ...]
    rows: tuple[tuple[CellValue, ...], ...] = ()


@dataclass(frozen=True)
class Summary:
    updated_rows: int
    found_and_updated: tuple[str, ...]
    not_found: tuple[str, ...]
    duplicates: tuple[str, ...]
    description_mismatches: tuple[DescriptionMismatch, ...]
    skipped_strikethrough_rows: tuple[SkippedRowInfo, ...]
    lumpsum_rows: tuple[FlaggedRowInfo, ...]
    included_rows: tuple[FlaggedRowInfo, ...]
    untouched_catalog_rows: UntouchedCatalogRows
    text_values_detected: tuple[TextValueInfo, ...] = ()
    missing_values_replaced: tuple[MissingValueInfo, ...] = ()
    assumptions: tuple[str, ...] = ()
    output_file: str = ""

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation (used for the summary report file)."""
        return {
            "updated_rows": self.updated_rows,
            "found_and_updated": list(self.found_and_updated),
            "not_found": list(self.not_found),
            "duplicates": list(self.duplicates),
            "description_mismatches": [
                {
                    "code": m.code,
                    "catalog_description": m.catalog_description,
                    "order_description": m.order_description,
                }
                for m in self.description_mismatches
            ],
            "skipped_strikethrough_rows": [
                {"display_row": s.display_row, "article": s.article, "reason": s.reason}
                for s in self.skipped_strikethrough_rows
            ],
            "lumpsum_rows": [{"code": f.code, "cell": f.cell} for f in self.lumpsum_rows],
            "included_rows": [{"code": f.code, "cell": f.cell} for f in self.included_rows],
            "text_values_detected": [
                {"code": t.code, "field": t.field, "original_value": t.original_value}
                for t in self.text_values_detected
            ],
            "missing_values_replaced": [
                {"code": m.code, "field": m.field} for m in self.missing_values_replaced
            ],
            "untouched_catalog_rows": {
                "headers": list(self.untouched_catalog_rows.headers),
                "rows": [[cell_text(c) for c in row] for row in self.untouched_catalog_rows.rows],
            },
            "assumptions": list(self.assumptions),
            "output_file": self.output_file,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    summary: Summary
    output_rows: tuple[OutputRow, ...]
    table: OutputTable
    workbook: bytes = field(default=b"", repr=False)
