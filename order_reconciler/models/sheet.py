from __future__ import annotations

from dataclasses import dataclass, field

from .cell import EMPTY, CellValue, is_blank

"""Sheet model produced by the spreadsheet codec.

Rows and columns are 0-based. A Sheet is immutable once read: the grid,
the per-cell strike styles and the merged ranges never change during a run.
"""

__all__ = [
    "RawRow",
    "CellStyle",
    "MergedRange",
    "Sheet",
]


@dataclass(frozen=True)
class RawRow:
    """One source row: its 0-based index and the ordered cell values."""
    index: int
    cells: tuple[CellValue, ...]

    def get(self, column: int) -> CellValue:
        if column < 0 or column >= len(self.cells):
            return EMPTY
        return self.cells[column]

    @property
    def display_row(self) -> int:
        return self.index + 1

    def is_empty(self) -> bool:
        return all(is_blank(c) for c in self.cells)


@dataclass(frozen=True)
class CellStyle:
    """Strike information for a single cell.

    strike: whole-cell font strike flag
    run_strikes: strike flag of every rich-text run (empty for plain cells)
    """
    strike: bool = False
    run_strikes: tuple[bool, ...] = ()

    @property
    def is_struck(self) -> bool:
        return self.strike or any(self.run_strikes)


@dataclass(frozen=True)
class MergedRange:
    """Inclusive 0-based rectangle; (first_row, first_col) is the top-left cell."""
    first_row: int
    first_col: int
    last_row: int
    last_col: int

    def contains(self, row: int, col: int) -> bool:
        return self.first_row <= row <= self.last_row and self.first_col <= col <= self.last_col


@dataclass(frozen=True)
class Sheet:
    name: str
    rows: tuple[RawRow, ...]
    styles: dict[tuple[int, int], CellStyle] = field(default_factory=dict)
    merged: tuple[MergedRange, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    def row(self, index: int) -> RawRow:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return RawRow(index=index, cells=())
