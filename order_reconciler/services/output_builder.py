from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from ..models.output import (
    DECIMAL_FORMAT,
    INTEGER_FORMAT,
    OUTPUT_HEADERS,
    TEXT_FORMAT,
    CellKind,
    OutputCell,
    OutputRow,
    OutputTable,
)
from ..models.records import Classification, PricingState
from .normalizers import descriptions_match

"""Output table assembly.

The total column is a live spreadsheet formula over the row's own quantity,
price and discount cells; the value it evaluates to is stored next to it for
consumers that do not calculate formulas.
"""

__all__ = [
    "secondary_description",
    "compute_total",
    "total_formula",
    "build_output_row",
    "build_output_table",
    "OUTPUT_ASSUMPTIONS",
]

# Column letters of the cells referenced by the total formula.
_QUANTITY_COL = "D"
_PRICE_COL = "E"
_DISCOUNT_COL = "F"

_TAGGED_STATES = (PricingState.LUMPSUM, PricingState.INCLUDED)

OUTPUT_ASSUMPTIONS: tuple[str, ...] = (
    "File format: Office Open XML workbook (.xlsx) with a single sheet.",
    "No cell uses the 'General' format: every cell is explicitly text or number.",
    "Integer format '0' is applied to the quantity column.",
    "Decimal format '0.00' is applied to the price, discount and total columns.",
    "Text format '@' is applied to the code, description, secondary description and job reference columns.",
    "The total column holds a ROUND(quantity*price*(1+discount/100),2) formula with its cached value.",
    "Rows without a usable price (INCLUDED) are reported but not written to the output table.",
    "Rows without a usable quantity (LUMPSUM) are written with quantity 1.",
)


def secondary_description(
    order_description: str,
    catalog_description: str,
    state: PricingState,
    separator: str = " | ",
) -> str | None:
    """Order description when it differs from the catalog's, plus the state tag."""
    parts: list[str] = []
    if order_description.strip() and not descriptions_match(order_description, catalog_description):
        parts.append(order_description)
    if state in _TAGGED_STATES:
        parts.append(state.value)
    return separator.join(parts) or None


def compute_total(quantity: float, list_price: float, discount: float | None) -> float:
    """round(quantity * list price * (1 + discount / 100), 2), rounding half away from zero."""
    factor = Decimal(1) + Decimal(str(discount or 0)) / Decimal(100)
    amount = Decimal(str(quantity)) * Decimal(str(list_price)) * factor
    return float(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def total_formula(sheet_row: int) -> str:
    """Formula for the total cell of 1-based spreadsheet row `sheet_row`."""
    qty = f"{_QUANTITY_COL}{sheet_row}"
    price = f"{_PRICE_COL}{sheet_row}"
    disc = f"{_DISCOUNT_COL}{sheet_row}"
    return f"ROUND({qty}*{price}*(1+IF(ISBLANK({disc}),0,{disc})/100),2)"


def build_output_row(
    *,
    code: str,
    catalog_description: str,
    order_description: str,
    classification: Classification,
    job_reference: str | None,
    source_row: int,
    separator: str = " | ",
) -> OutputRow:
    return OutputRow(
        code=code,
        description=catalog_description,
        secondary_description=secondary_description(
            order_description, catalog_description, classification.state, separator
        ),
        quantity=classification.quantity,
        list_price=classification.list_price,
        discount=classification.discount,
        total=compute_total(classification.quantity, classification.list_price, classification.discount),
        job_reference=job_reference or None,
        state=classification.state,
        source_row=source_row,
    )


def _text(value: str | None) -> OutputCell:
    return OutputCell(kind=CellKind.TEXT, number_format=TEXT_FORMAT, value=value)


def _number(value: float | None, number_format: str = DECIMAL_FORMAT) -> OutputCell:
    return OutputCell(kind=CellKind.NUMBER, number_format=number_format, value=value)


def build_output_table(rows: Iterable[OutputRow], sheet_name: str = "Database_AdHoc") -> OutputTable:
    """Lay out OutputRows as cells; row 0 of the sheet is the header."""
    headers = tuple(_text(h) for h in OUTPUT_HEADERS)
    cell_rows: list[tuple[OutputCell, ...]] = []
    for offset, row in enumerate(rows):
        sheet_row = offset + 2  # 1-based, after the header
        cell_rows.append(
            (
                _text(row.code),
                _text(row.description),
                _text(row.secondary_description),
                _number(row.quantity, INTEGER_FORMAT),
                _number(row.list_price),
                _number(row.discount),
                OutputCell(
                    kind=CellKind.NUMBER,
                    number_format=DECIMAL_FORMAT,
                    value=row.total,
                    formula=total_formula(sheet_row),
                ),
                _text(row.job_reference),
            )
        )
    return OutputTable(sheet_name=sheet_name, headers=headers, rows=tuple(cell_rows))
