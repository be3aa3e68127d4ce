from __future__ import annotations

from ..models.records import Classification, PricingState

"""Pricing state classification of a single order row.

effective price = discounted price when positive, otherwise the unit price.
- effective price == 0                     -> INCLUDED (everything zeroed)
- effective price != 0, no/zero quantity   -> LUMPSUM (quantity forced to 1)
- otherwise                                -> NORMAL
A discount is only produced when 0 < discounted < list price.
"""

__all__ = [
    "classify_row",
    "compute_discount",
]


def compute_discount(list_price: float, discounted_price: float) -> float | None:
    """Negative percentage discount, or None when the row carries no discount."""
    if list_price > 0 and 0 < discounted_price < list_price:
        return -(1 - discounted_price / list_price) * 100
    return None


def classify_row(
    unit_price: float,
    discounted_price: float,
    quantity: float | None,
) -> Classification:
    effective_price = discounted_price if discounted_price > 0 else unit_price

    if effective_price == 0:
        return Classification(
            state=PricingState.INCLUDED,
            quantity=0.0,
            list_price=0.0,
            discount=None,
        )

    discount = compute_discount(unit_price, discounted_price)
    if quantity is None or quantity == 0:
        return Classification(
            state=PricingState.LUMPSUM,
            quantity=1.0,
            list_price=unit_price,
            discount=discount,
        )
    return Classification(
        state=PricingState.NORMAL,
        quantity=quantity,
        list_price=unit_price,
        discount=discount,
    )
