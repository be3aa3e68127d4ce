from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Union

"""Tagged cell values shared by the codec and the normalizers.

A spreadsheet cell is one of Empty, Number, Text or Formula. Formula keeps the
expression together with the value cached by the last spreadsheet calculation,
so consumers that cannot evaluate formulas still see a value.
"""

__all__ = [
    "Empty",
    "Number",
    "Text",
    "Formula",
    "CellValue",
    "EMPTY",
    "cell_from_raw",
    "cell_text",
    "is_blank",
]


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Formula:
    expression: str
    cached: Empty | Number | Text


CellValue = Union[Empty, Number, Text, Formula]

EMPTY = Empty()


def cell_from_raw(value: Any) -> CellValue:
    """Wrap a plain Python value (as returned by a reader) into a CellValue."""
    if value is None:
        return EMPTY
    if isinstance(value, (Empty, Number, Text, Formula)):
        return value
    if isinstance(value, bool):
        return Text("TRUE" if value else "FALSE")
    if isinstance(value, (int, float)):
        return Number(float(value))
    if isinstance(value, (datetime, date)):
        return Text(value.isoformat())
    text = str(value)
    if text == "":
        return EMPTY
    return Text(text)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(value)


def cell_text(cell: CellValue) -> str:
    """Render a cell the way a spreadsheet shows its raw content."""
    if isinstance(cell, Formula):
        cell = cell.cached
    if isinstance(cell, Number):
        return _format_number(cell.value)
    if isinstance(cell, Text):
        return cell.value
    return ""


def is_blank(cell: CellValue) -> bool:
    return cell_text(cell).strip() == ""
