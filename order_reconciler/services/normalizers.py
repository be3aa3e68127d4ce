from __future__ import annotations

import re
from collections.abc import Collection, Iterable

from ..models.cell import CellValue, Formula, Number, cell_from_raw, cell_text

"""Locale tolerant cell value normalizers.

Order sheets arrive from many suppliers, so prices and quantities are written
with either "1.234,56" or "1,234.56" conventions and may carry units, currency
or keywords. None of these functions raise on malformed input: prices
degrade to 0.0, quantities to None.
"""

__all__ = [
    "normalize_header",
    "normalize_code_header",
    "normalize_code",
    "normalize_description",
    "descriptions_match",
    "parse_price",
    "parse_quantity",
    "included_pattern",
    "DEFAULT_PRICE_SENTINELS",
    "DEFAULT_INCLUDED_KEYWORDS",
]

DEFAULT_PRICE_SENTINELS: frozenset[str] = frozenset({"9999999", "9999999999"})
DEFAULT_INCLUDED_KEYWORDS: tuple[str, ...] = ("included", "incl.", "incl", "includi", "incluso")

_WHITESPACE = re.compile(r"\s+")
_CODE_HEADER_STRIP = re.compile(r"[\s\[\]()]+")
_NON_CODE = re.compile(r"[^A-Z0-9]")
_SIGNED_FLOAT = re.compile(r"-?\d+(?:\.\d+)?")
# quantities may omit the integer part (",5")
_QUANTITY_FLOAT = re.compile(r"-?(?:\d+(?:\.\d+)?|\.\d+)")
_QUANTITY_NOISE = re.compile(r"[a-zA-Z()]")
_NUMERIC_RUN = re.compile(r"-?[\d.,]+")


def _as_cell(value: CellValue | object) -> CellValue:
    cell = cell_from_raw(value)
    if isinstance(cell, Formula):
        return cell.cached
    return cell


def normalize_header(value: CellValue | object) -> str:
    """Trim, lowercase and collapse whitespace runs."""
    return _WHITESPACE.sub(" ", cell_text(_as_cell(value)).strip().lower())


def normalize_code_header(value: CellValue | object) -> str:
    """Lowercase and drop whitespace and brackets, so "[ L1 ]" becomes "l1"."""
    return _CODE_HEADER_STRIP.sub("", cell_text(_as_cell(value)).strip().lower())


def normalize_code(value: CellValue | object) -> str:
    """Uppercase and keep only A-Z0-9. Idempotent."""
    return _NON_CODE.sub("", cell_text(_as_cell(value)).upper())


def normalize_description(value: CellValue | object) -> str:
    text = cell_text(_as_cell(value)).strip().lower()
    text = _WHITESPACE.sub(" ", text)
    text = text.replace("&", "and")
    if text.endswith((".", ",")):
        text = text[:-1].rstrip()
    return text


def descriptions_match(left: CellValue | object, right: CellValue | object) -> bool:
    return normalize_description(left) == normalize_description(right)


def included_pattern(keywords: Iterable[str] = DEFAULT_INCLUDED_KEYWORDS) -> re.Pattern[str]:
    # Longest first so "included" wins over "incl".
    ordered = sorted({k.strip().lower() for k in keywords if k.strip()}, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(k) for k in ordered) + r")\b", re.IGNORECASE)


_DEFAULT_INCLUDED = included_pattern()


def _apply_separator_convention(text: str) -> str:
    """Resolve decimal/thousands separators by whichever of ',' and '.' is rightmost."""
    if text.rfind(",") > text.rfind("."):
        return text.replace(".", "").replace(",", ".", 1)
    return text.replace(",", "")


def parse_price(
    value: CellValue | object,
    *,
    sentinels: Collection[str] = DEFAULT_PRICE_SENTINELS,
    included: re.Pattern[str] | None = None,
) -> float:
    """Parse a price cell to a float; empty, sentinel, "included" or garbage -> 0.0."""
    cell = _as_cell(value)
    text = cell_text(cell).strip()
    if text == "" or text in sentinels:
        return 0.0
    if isinstance(cell, Number):
        return cell.value
    if (included or _DEFAULT_INCLUDED).search(text):
        return 0.0
    match = _SIGNED_FLOAT.search(_apply_separator_convention(text))
    if match is None:
        return 0.0
    return float(match.group(0))


def parse_quantity(value: CellValue | object) -> float | None:
    """Parse a quantity cell; None means "no quantity stated", unlike 0.0."""
    cell = _as_cell(value)
    if isinstance(cell, Number):
        return cell.value
    text = cell_text(cell).replace("\u00a0", " ").strip()
    if text == "":
        return None
    cleaned = _QUANTITY_NOISE.sub("", text).strip()
    if cleaned == "":
        run = _NUMERIC_RUN.search(text)
        if run is None:
            return None
        cleaned = run.group(0)
    match = _QUANTITY_FLOAT.search(_apply_separator_convention(cleaned))
    if match is None:
        return None
    return float(match.group(0))
