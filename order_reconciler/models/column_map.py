from __future__ import annotations

from dataclasses import dataclass

"""ColumnMap model for the order sheet header layout.

Built once per order sheet by the header locator. A column index of -1 means
the field was not found inside the scan window.
"""

__all__ = [
    "ColumnMap",
    "MANDATORY_FIELDS",
    "NOT_FOUND",
]

NOT_FOUND = -1

MANDATORY_FIELDS: tuple[str, ...] = (
    "quantity",
    "unit_price",
    "discounted_unit_price",
    "description",
    "total_price",
    "segment_1",
    "segment_2",
    "segment_3",
    "segment_4",
)


@dataclass(frozen=True)
class ColumnMap:
    header_row: int
    quantity: int = NOT_FOUND
    unit_price: int = NOT_FOUND
    discounted_unit_price: int = NOT_FOUND
    description: int = NOT_FOUND
    total_price: int = NOT_FOUND
    segment_1: int = NOT_FOUND
    segment_2: int = NOT_FOUND
    segment_3: int = NOT_FOUND
    segment_4: int = NOT_FOUND

    @property
    def segments(self) -> tuple[int, int, int, int]:
        return (self.segment_1, self.segment_2, self.segment_3, self.segment_4)

    @property
    def key_columns(self) -> tuple[int, ...]:
        """Columns inspected for strikethrough, in checking order, located ones only."""
        candidates = (
            *self.segments,
            self.description,
            self.quantity,
            self.unit_price,
            self.discounted_unit_price,
        )
        return tuple(c for c in candidates if c != NOT_FOUND)

    def missing_fields(self) -> list[str]:
        return [name for name in MANDATORY_FIELDS if getattr(self, name) == NOT_FOUND]
