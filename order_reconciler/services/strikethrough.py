from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..models.sheet import MergedRange, Sheet

if TYPE_CHECKING:
    from ..excel.codec import SpreadsheetCodec

"""Strikethrough detection for order rows.

Suppliers cancel lines by striking them through instead of deleting them.
A row counts as struck as soon as one of its key cells is struck, either as
a whole-cell font strike or through a single struck rich-text run. Cells
inside a merged range take their style from the range's top-left cell.
"""

__all__ = [
    "StrikethroughDetector",
]

logger = logging.getLogger(__name__)


class StrikethroughDetector:
    """Per-sheet detector; merged ranges are read once from the codec."""

    def __init__(self, codec: SpreadsheetCodec, sheet: Sheet) -> None:
        self._codec = codec
        self._sheet = sheet
        self._merged: tuple[MergedRange, ...] = tuple(codec.merged_ranges(sheet))

    def style_origin(self, row: int, col: int) -> tuple[int, int]:
        """Cell whose style applies to (row, col): the merge's top-left cell or itself."""
        for merged in self._merged:
            if merged.contains(row, col):
                return merged.first_row, merged.first_col
        return row, col

    def is_cell_struck(self, row: int, col: int) -> bool:
        origin_row, origin_col = self.style_origin(row, col)
        return self._codec.cell_style(self._sheet, origin_row, origin_col).is_struck

    def struck_column(self, row: int, key_columns: Sequence[int]) -> int | None:
        """First key column found struck in `row`, or None. Stops at the first hit."""
        for col in key_columns:
            if col < 0:
                continue
            if self.is_cell_struck(row, col):
                logger.debug("row=%d struck at column=%d", row + 1, col)
                return col
        return None

    def is_row_struck(self, row: int, key_columns: Sequence[int]) -> bool:
        return self.struck_column(row, key_columns) is not None
