from __future__ import annotations

import logging
from dataclasses import replace

from ..errors import MissingHeadersError
from ..models.column_map import NOT_FOUND, ColumnMap
from ..models.config_models import OrderHeaderLabels
from ..models.sheet import Sheet
from .normalizers import normalize_code_header, normalize_header

"""Order sheet header discovery.

Headers sit somewhere near the top of the order sheet and may be split over
two rows, so the first `scan_rows` rows are scanned cell by cell. The first
cell matching a field wins; the header row is the deepest row that produced
a match.
"""

__all__ = [
    "locate_headers",
    "DEFAULT_SCAN_ROWS",
]

logger = logging.getLogger(__name__)

DEFAULT_SCAN_ROWS = 20

_TEXT_FIELDS = ("quantity", "unit_price", "discounted_unit_price", "description", "total_price")
_SEGMENT_FIELDS = ("segment_1", "segment_2", "segment_3", "segment_4")


def _matches_text_field(field_name: str, header: str, labels: OrderHeaderLabels) -> bool:
    if not header:
        return False
    if not any(label in header for label in getattr(labels, field_name)):
        return False
    if field_name == "unit_price":
        return not any(excluded in header for excluded in labels.unit_price_exclude)
    return True


def locate_headers(
    sheet: Sheet,
    *,
    labels: OrderHeaderLabels | None = None,
    scan_rows: int = DEFAULT_SCAN_ROWS,
    require_all: bool = True,
) -> ColumnMap:
    """Find the column of every mandatory field within the first `scan_rows` rows.

    Raises:
        MissingHeadersError: one or more mandatory fields were not located
            (only when require_all is True); the error names all of them.
    """
    labels = labels or OrderHeaderLabels()
    found: dict[str, int] = {}
    header_row = NOT_FOUND

    for raw_row in sheet.rows[:scan_rows]:
        for col, cell in enumerate(raw_row.cells):
            header = normalize_header(cell)
            short_code = normalize_code_header(cell)
            for field_name in _TEXT_FIELDS:
                if field_name not in found and _matches_text_field(field_name, header, labels):
                    found[field_name] = col
                    header_row = max(header_row, raw_row.index)
            for field_name in _SEGMENT_FIELDS:
                if field_name not in found and short_code and short_code in getattr(labels, field_name):
                    found[field_name] = col
                    header_row = max(header_row, raw_row.index)

    column_map = replace(ColumnMap(header_row=header_row), **found)
    logger.debug("order headers row=%d columns=%s", header_row, found)

    missing = column_map.missing_fields()
    if missing and require_all:
        raise MissingHeadersError(missing)
    return column_map
