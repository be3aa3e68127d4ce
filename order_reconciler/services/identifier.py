from __future__ import annotations

import re
from collections.abc import Sequence

from ..models.cell import CellValue, cell_from_raw, cell_text

"""Article code construction from the four L1..L4 order sheet segments.

L1 is an alphanumeric family prefix taken as written; L2..L4 are numeric
levels. The code is L1 + L2 (3 digits) + L3 (2 digits) [+ L4 (2 digits)].
Only results of length 6 or 8 are codes; anything else is a construction
failure, the prefix length itself is not validated.
"""

__all__ = [
    "construct_code",
    "VALID_CODE_LENGTHS",
]

VALID_CODE_LENGTHS = (6, 8)

_NON_DIGIT = re.compile(r"\D")


def _digits(value: CellValue | object) -> str:
    return _NON_DIGIT.sub("", cell_text(cell_from_raw(value)).strip())


def construct_code(segments: Sequence[CellValue | object]) -> str | None:
    """Return the article code for (L1, L2, L3, L4), or None when it cannot be built.

    >>> construct_code(["X", "12", "3", ""])
    'X01203'
    >>> construct_code(["A", 5, 1, 7])
    'A0050107'
    """
    padded = list(segments[:4]) + [None] * (4 - len(segments[:4]))
    l1 = cell_text(cell_from_raw(padded[0])).strip().upper()
    l2, l3, l4 = (_digits(v) for v in padded[1:])

    if not l1 or not l2 or not l3:
        return None

    code = f"{l1}{l2.zfill(3)}{l3.zfill(2)}"
    if l4:
        code += l4.zfill(2)
    return code if len(code) in VALID_CODE_LENGTHS else None
