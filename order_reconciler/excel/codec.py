from __future__ import annotations

import zipfile
from io import BytesIO
from typing import Any, Protocol

import xlsxwriter
from openpyxl import load_workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import SheetReadError
from ..models.cell import EMPTY, CellValue, Formula, cell_from_raw
from ..models.output import CellKind, OutputCell, OutputTable
from ..models.sheet import CellStyle, MergedRange, RawRow, Sheet

"""Spreadsheet codec.

The engine only talks to the SpreadsheetCodec protocol; OpenpyxlCodec is the
production implementation. Reading uses openpyxl with rich text enabled so
partially struck cells are visible; a second data_only pass provides the
cached results of formula cells. Writing uses XlsxWriter because it can store
a formula together with its cached value.
"""

__all__ = [
    "SpreadsheetCodec",
    "OpenpyxlCodec",
    "DEFAULT_STYLE",
]

DEFAULT_STYLE = CellStyle()

_READ_ERRORS = (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError, TypeError)


class SpreadsheetCodec(Protocol):
    def read_workbook(self, data: bytes) -> Sheet: ...

    def write_workbook(self, table: OutputTable) -> bytes: ...

    def merged_ranges(self, sheet: Sheet) -> tuple[MergedRange, ...]: ...

    def cell_style(self, sheet: Sheet, row: int, col: int) -> CellStyle: ...


def _run_strikes(value: CellRichText) -> tuple[bool, ...]:
    strikes: list[bool] = []
    for part in value:
        if isinstance(part, TextBlock):
            strikes.append(bool(getattr(part.font, "strike", False)))
        else:
            strikes.append(False)
    return tuple(strikes)


def _formula_text(value: Any) -> str:
    # ArrayFormula and DataTableFormula expose the expression as .text
    text = getattr(value, "text", None) or str(value)
    return text[1:] if text.startswith("=") else text


class OpenpyxlCodec:
    """SpreadsheetCodec backed by openpyxl (read) and XlsxWriter (write)."""

    def read_workbook(self, data: bytes) -> Sheet:
        """Read the first worksheet of an .xlsx/.xlsm buffer.

        Raises:
            SheetReadError: empty buffer, unreadable workbook or no worksheet
        """
        if not data:
            raise SheetReadError("workbook buffer is empty")
        try:
            wb = load_workbook(BytesIO(data), rich_text=True)
        except _READ_ERRORS as e:
            raise SheetReadError(f"workbook is not readable as a spreadsheet: {e}") from e
        try:
            if not wb.worksheets:
                raise SheetReadError("workbook contains no worksheet")
            ws = wb.worksheets[0]
            cached = self._cached_values(data) if self._has_formulas(ws) else {}

            rows: list[RawRow] = []
            styles: dict[tuple[int, int], CellStyle] = {}
            for r_idx, cells in enumerate(ws.iter_rows()):
                values: list[CellValue] = []
                for c_idx, cell in enumerate(cells):
                    values.append(self._cell_value(cell, cached.get((r_idx, c_idx))))
                    style = self._cell_style(cell)
                    if style is not DEFAULT_STYLE:
                        styles[(r_idx, c_idx)] = style
                rows.append(RawRow(index=r_idx, cells=tuple(values)))

            merged = tuple(
                MergedRange(
                    first_row=rng.min_row - 1,
                    first_col=rng.min_col - 1,
                    last_row=rng.max_row - 1,
                    last_col=rng.max_col - 1,
                )
                for rng in ws.merged_cells.ranges
            )
            return Sheet(name=ws.title, rows=tuple(rows), styles=styles, merged=merged)
        finally:
            wb.close()

    def merged_ranges(self, sheet: Sheet) -> tuple[MergedRange, ...]:
        return sheet.merged

    def cell_style(self, sheet: Sheet, row: int, col: int) -> CellStyle:
        return sheet.styles.get((row, col), DEFAULT_STYLE)

    def write_workbook(self, table: OutputTable) -> bytes:
        buffer = BytesIO()
        workbook = xlsxwriter.Workbook(
            buffer,
            {
                "in_memory": True,
                "strings_to_formulas": False,
                "strings_to_numbers": False,
                "strings_to_urls": False,
            },
        )
        try:
            formats: dict[str, Any] = {}

            def fmt(number_format: str) -> Any:
                if number_format not in formats:
                    formats[number_format] = workbook.add_format({"num_format": number_format})
                return formats[number_format]

            ws = workbook.add_worksheet(table.sheet_name)
            for col, cell in enumerate(table.headers):
                self._write_cell(ws, 0, col, cell, fmt(cell.number_format))
            for r_idx, row in enumerate(table.rows, start=1):
                for col, cell in enumerate(row):
                    self._write_cell(ws, r_idx, col, cell, fmt(cell.number_format))
        finally:
            workbook.close()
        return buffer.getvalue()

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _has_formulas(ws: Any) -> bool:
        for row in ws.iter_rows():
            for cell in row:
                if cell.data_type == "f":
                    return True
        return False

    @staticmethod
    def _cached_values(data: bytes) -> dict[tuple[int, int], Any]:
        wb = load_workbook(BytesIO(data), data_only=True)
        try:
            ws = wb.worksheets[0]
            return {
                (r_idx, c_idx): cell.value
                for r_idx, row in enumerate(ws.iter_rows())
                for c_idx, cell in enumerate(row)
                if cell.value is not None
            }
        finally:
            wb.close()

    @staticmethod
    def _cell_value(cell: Any, cached: Any) -> CellValue:
        value = cell.value
        if value is None:
            return EMPTY
        if cell.data_type == "f":
            result = cell_from_raw(cached)
            if isinstance(result, Formula):  # pragma: no cover (data_only never yields formulas)
                result = EMPTY
            return Formula(expression=_formula_text(value), cached=result)
        if isinstance(value, CellRichText):
            return cell_from_raw(str(value))
        return cell_from_raw(value)

    @staticmethod
    def _cell_style(cell: Any) -> CellStyle:
        strike = bool(getattr(cell.font, "strike", False)) if cell.has_style else False
        runs = _run_strikes(cell.value) if isinstance(cell.value, CellRichText) else ()
        if not strike and not any(runs):
            return DEFAULT_STYLE
        return CellStyle(strike=strike, run_strikes=runs)

    @staticmethod
    def _write_cell(ws: Any, row: int, col: int, cell: OutputCell, cell_format: Any) -> None:
        if cell.is_formula:
            ws.write_formula(row, col, f"={cell.formula}", cell_format, cell.value)
        elif cell.value is None or cell.value == "":
            ws.write_blank(row, col, None, cell_format)
        elif cell.kind is CellKind.TEXT:
            ws.write_string(row, col, str(cell.value), cell_format)
        else:
            ws.write_number(row, col, float(cell.value), cell_format)
