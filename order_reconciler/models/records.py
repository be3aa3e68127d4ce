from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .cell import CellValue

"""Per-row records produced and consumed inside one reconciliation run."""

__all__ = [
    "PricingState",
    "UnresolvedRow",
    "Corrections",
    "CatalogRecord",
    "Classification",
]


class PricingState(Enum):
    """Pricing behaviour of an order row (terminal, never revisited).

    - NORMAL: price and positive quantity stated
    - LUMPSUM: price stated but no usable quantity, quantity forced to 1
    - INCLUDED: no usable price, counted but never emitted
    """
    NORMAL = "NORMAL"
    LUMPSUM = "LUMPSUM"
    INCLUDED = "INCLUDED"


@dataclass(frozen=True)
class UnresolvedRow:
    """Order row carrying a description but no constructible article code."""
    row_index: int  # 0-based source row
    display_row: int  # 1-based spreadsheet row
    segments: tuple[str, str, str, str]
    description: str


class Corrections(Mapping[int, str]):
    """Immutable row index -> article code overrides supplied after a scan.

    Values are code-normalized on construction; entries whose normalized
    value is empty are dropped rather than stored.
    """

    def __init__(self, entries: Mapping[int, str] | None = None) -> None:
        from ..services.normalizers import normalize_code

        cleaned: dict[int, str] = {}
        for row_index, raw_code in (entries or {}).items():
            code = normalize_code(raw_code)
            if code:
                cleaned[int(row_index)] = code
        self._entries = MappingProxyType(dict(sorted(cleaned.items())))

    @classmethod
    def empty(cls) -> Corrections:
        return cls()

    def __getitem__(self, row_index: int) -> str:
        return self._entries[row_index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Corrections):
            return dict(self._entries) == dict(other._entries)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._entries.items()))

    def __repr__(self) -> str:
        return f"Corrections({dict(self._entries)!r})"


@dataclass(frozen=True)
class CatalogRecord:
    code: str  # normalized
    description: str
    row_index: int  # 0-based row in the catalog sheet
    raw: tuple[CellValue, ...] = field(default=(), compare=False)
    raw_code: str = ""  # code cell as written in the catalog


@dataclass(frozen=True)
class Classification:
    """Outcome of the row classifier: state plus derived (quantity, price, discount)."""
    state: PricingState
    quantity: float
    list_price: float
    discount: float | None  # negative percentage, None when there is no discount
