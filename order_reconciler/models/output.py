from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .records import PricingState

"""Output table models.

Every output cell carries an explicit kind (text or number) and an explicit
number format; nothing is left to the spreadsheet "General" format.
"""

__all__ = [
    "CellKind",
    "TEXT_FORMAT",
    "INTEGER_FORMAT",
    "DECIMAL_FORMAT",
    "OutputCell",
    "OutputRow",
    "OutputTable",
    "OUTPUT_HEADERS",
]

TEXT_FORMAT = "@"
INTEGER_FORMAT = "0"
DECIMAL_FORMAT = "0.00"

# Column layout expected by the AdHoc import.
OUTPUT_HEADERS: tuple[str, ...] = (
    "Articolo",
    "Descrizione",
    "Descrizione supp",
    "QUANTITA",
    "Prezzo",
    "Sconto",
    "Prezzo Totale",
    "Commessa",
)


class CellKind(Enum):
    TEXT = "text"
    NUMBER = "number"


@dataclass(frozen=True)
class OutputCell:
    kind: CellKind
    number_format: str
    value: str | float | None = None  # for formula cells: the cached result
    formula: str | None = None

    @property
    def is_formula(self) -> bool:
        return self.formula is not None


@dataclass(frozen=True)
class OutputRow:
    """One emitted article line, in logical form (before cell layout)."""
    code: str
    description: str
    secondary_description: str | None
    quantity: float
    list_price: float
    discount: float | None
    total: float  # rounded quantity * list price * (1 + discount / 100)
    job_reference: str | None
    state: PricingState
    source_row: int  # 0-based order sheet row


@dataclass(frozen=True)
class OutputTable:
    """Header row plus one cell row per OutputRow, ready for the codec."""
    sheet_name: str
    headers: tuple[OutputCell, ...]
    rows: tuple[tuple[OutputCell, ...], ...]

    def __len__(self) -> int:
        return len(self.rows)
