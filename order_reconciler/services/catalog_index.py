from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..models.cell import cell_text
from ..models.records import CatalogRecord
from ..models.sheet import Sheet
from .identifier import VALID_CODE_LENGTHS
from .normalizers import normalize_code

"""Deduplicated catalog index.

Records are keyed by normalized code in one map per valid code length, so a
6-character code never matches an 8-character entry. On duplicate codes the
first occurrence (lowest catalog row) is kept and the code is reported.
"""

__all__ = [
    "CatalogIndex",
    "build_catalog_index",
]

logger = logging.getLogger(__name__)


@dataclass
class CatalogIndex:
    headers: tuple[str, ...]
    code_column: int
    description_column: int
    by_length: dict[int, dict[str, CatalogRecord]] = field(
        default_factory=lambda: {length: {} for length in VALID_CODE_LENGTHS}
    )
    duplicates: set[str] = field(default_factory=set)
    # every catalog data row with a non-empty code, in sheet order
    coded_rows: list[CatalogRecord] = field(default_factory=list)

    def lookup(self, code: str) -> CatalogRecord | None:
        normalized = normalize_code(code)
        return self.by_length.get(len(normalized), {}).get(normalized)

    def __len__(self) -> int:
        return sum(len(records) for records in self.by_length.values())

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.lookup(code) is not None


def build_catalog_index(sheet: Sheet, code_column: int, description_column: int) -> CatalogIndex:
    """Index the catalog data rows (row 0 is the header row)."""
    headers = tuple(cell_text(c).strip() for c in sheet.row(0).cells)
    index = CatalogIndex(headers=headers, code_column=code_column, description_column=description_column)

    for raw_row in sheet.rows[1:]:
        raw_code = raw_row.get(code_column)
        code = normalize_code(raw_code)
        if not code:
            continue
        record = CatalogRecord(
            code=code,
            description=cell_text(raw_row.get(description_column)).strip(),
            row_index=raw_row.index,
            raw=raw_row.cells,
            raw_code=cell_text(raw_code).strip(),
        )
        index.coded_rows.append(record)
        bucket = index.by_length.get(len(code))
        if bucket is None:
            continue
        if code in bucket:
            index.duplicates.add(code)
            logger.debug("duplicate catalog code=%s row=%d kept row=%d", code, raw_row.display_row, bucket[code].row_index + 1)
            continue
        bucket[code] = record

    if index.duplicates:
        logger.warning("catalog contains %d duplicated code(s); first occurrence kept", len(index.duplicates))
    return index
