# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Iterable, Sequence
from io import BytesIO
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import Workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont
from openpyxl.styles import Font

from order_reconciler.logging.init import reset_logging
from order_reconciler.models.cell import cell_from_raw
from order_reconciler.models.sheet import CellStyle, MergedRange, RawRow, Sheet

ORDER_HEADERS = [
    "L1", "L2", "L3", "L4", "Description", "Q.ty", "Unit price", "Discounted unit price", "Total price",
]
CATALOG_HEADERS = ["Articolo", "Descrizione", "Prezzo listino"]

# Title + blank row above the header: header is spreadsheet row 3, data starts at row 4.
ORDER_TITLE_ROWS: tuple[Sequence[object], ...] = (["Offerta fornitore 2024/117"], [])


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ORDER_RECONCILER_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """header_scan_rows: 20
order_headers:
  quantity: ["q.ty", "qty"]
catalog_headers:
  code: ["articolo"]
  description: ["descrizione"]
price_sentinels: ["9999999"]
output:
  sheet_name: Database_AdHoc
  file_name: Database_AdHoc.xlsx
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "reconcile.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _workbook_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_order_workbook(
    rows: Iterable[Sequence[object]],
    *,
    headers: Sequence[object] = ORDER_HEADERS,
    title_rows: Iterable[Sequence[object]] = ORDER_TITLE_ROWS,
    struck: Iterable[str] = (),
    rich_struck: dict[str, tuple[str, str]] | None = None,
    merges: Iterable[str] = (),
) -> bytes:
    """Order workbook bytes.

    struck: cell coordinates given a whole-cell strike font
    rich_struck: coordinate -> (plain part, struck part) written as rich text
    merges: ranges such as "E5:E6", merged after the values are written
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Offerta"
    for title in title_rows:
        ws.append(list(title))
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))
    for coord in struck:
        ws[coord].font = Font(strike=True)
    for coord, (plain, struck_part) in (rich_struck or {}).items():
        ws[coord].value = CellRichText([plain, TextBlock(InlineFont(strike=True), struck_part)])
    for rng in merges:
        ws.merge_cells(rng)
    return _workbook_bytes(wb)


def build_catalog_workbook(
    rows: Iterable[Sequence[object]],
    *,
    headers: Sequence[object] = CATALOG_HEADERS,
) -> bytes:
    frame = pd.DataFrame([list(r) for r in rows], columns=list(headers), dtype=object)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Database", index=False)
    return buffer.getvalue()


def build_sheet(
    grid: Sequence[Sequence[object]],
    *,
    name: str = "Sheet1",
    styles: dict[tuple[int, int], CellStyle] | None = None,
    merged: Sequence[MergedRange] = (),
) -> Sheet:
    rows = tuple(
        RawRow(index=i, cells=tuple(cell_from_raw(v) for v in row)) for i, row in enumerate(grid)
    )
    return Sheet(name=name, rows=rows, styles=dict(styles or {}), merged=tuple(merged))


@pytest.fixture()
def order_workbook():
    return build_order_workbook


@pytest.fixture()
def catalog_workbook():
    return build_catalog_workbook


@pytest.fixture()
def make_sheet():
    return build_sheet


@pytest.fixture()
def sample_order_rows() -> list[list[object]]:
    # spreadsheet rows 4..8
    return [
        ["X", "12", "3", "", "Widget", None, "150,00", None, None],
        ["A", "5", "1", "7", "Gear box", 5, 100, 80, None],
        ["B", "1", "2", "", "Bolt", 10, "incluso", None, None],
        ["C", "9", "9", "", "Cable", 2, 10, None, None],
        ["D", "1", "1", "", "Damper old", 3, 20, None, None],
    ]


@pytest.fixture()
def sample_catalog_rows() -> list[list[object]]:
    return [
        ["X01203", "Widget", 150],
        ["A0050107", "Gear box", 100],
        ["B00102", "Bolt", 1],
        ["D00101", "Damper", 20],
        ["D00101", "Damper duplicate", 21],
        ["Z99901", "Unused", 5],
    ]


@pytest.fixture()
def input_files(temp_workdir: Path, sample_order_rows, sample_catalog_rows) -> tuple[Path, Path]:
    order = temp_workdir / "data" / "offerta.xlsx"
    catalog = temp_workdir / "data" / "catalogo.xlsx"
    order.write_bytes(build_order_workbook(sample_order_rows))
    catalog.write_bytes(build_catalog_workbook(sample_catalog_rows))
    return order, catalog
