from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd

from ..errors import MissingColumnsError, SheetReadError
from ..models.config_models import CatalogHeaderLabels
from ..models.sheet import Sheet
from ..services.normalizers import normalize_header
from .codec import SpreadsheetCodec

"""Input sheet helpers.

- read_input_file: load a workbook file into memory (raw bytes for the codec)
- read_sheet: decode bytes into a Sheet through the injected codec
- locate_catalog_columns: catalog header row is always row 0
- preview_frame / sheet_to_frame: pandas views used for inspection and reports
"""

__all__ = [
    "read_input_file",
    "read_sheet",
    "locate_catalog_columns",
    "preview_frame",
    "sheet_to_frame",
]


def read_input_file(path: Path) -> bytes:
    if not path.exists():
        raise SheetReadError(f"input file not found: {path}")
    if not path.is_file():
        raise SheetReadError(f"input path is not a file: {path}")
    return path.read_bytes()


def read_sheet(data: bytes, codec: SpreadsheetCodec, role: str) -> Sheet:
    """Decode `data` with `codec`; `role` names the input in error messages."""
    try:
        sheet = codec.read_workbook(data)
    except SheetReadError as e:
        raise SheetReadError(f"{role}: {e}") from e
    if len(sheet) == 0:
        raise SheetReadError(f"{role}: sheet '{sheet.name}' has no rows")
    return sheet


def locate_catalog_columns(sheet: Sheet, labels: CatalogHeaderLabels | None = None) -> tuple[int, int]:
    """Return (code column, description column) from the catalog header row.

    Raises:
        MissingColumnsError: either column is absent
    """
    labels = labels or CatalogHeaderLabels()
    headers = [normalize_header(c) for c in sheet.row(0).cells]

    def _find(candidates: tuple[str, ...]) -> int:
        for idx, header in enumerate(headers):
            if header and any(label in header for label in candidates):
                return idx
        return -1

    code_col = _find(labels.code)
    desc_col = _find(labels.description)
    missing = []
    if code_col == -1:
        missing.append("code (" + "/".join(labels.code) + ")")
    if desc_col == -1:
        missing.append("description (" + "/".join(labels.description) + ")")
    if missing:
        raise MissingColumnsError(missing)
    return code_col, desc_col


def preview_frame(data: bytes, rows: int = 5) -> pd.DataFrame:
    """First `rows` rows of the first sheet, raw and header-less."""
    return pd.read_excel(BytesIO(data), sheet_name=0, header=None, nrows=rows, engine="openpyxl")


def sheet_to_frame(headers: list[str] | tuple[str, ...], rows: list[list[str]]) -> pd.DataFrame:
    """Build a DataFrame padding/truncating rows to the header width."""
    width = len(headers)
    normalized = [(list(r) + [""] * width)[:width] for r in rows]
    columns = [h or f"column_{i + 1}" for i, h in enumerate(headers)]
    return pd.DataFrame(normalized, columns=columns)

