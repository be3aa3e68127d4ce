from __future__ import annotations

from datetime import date

import pytest

from order_reconciler.models.cell import EMPTY, Formula, Number, Text, cell_from_raw, cell_text, is_blank
from order_reconciler.models.column_map import ColumnMap
from order_reconciler.models.sheet import CellStyle, MergedRange, RawRow


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, EMPTY),
        ("", EMPTY),
        ("abc", Text("abc")),
        (3, Number(3.0)),
        (2.5, Number(2.5)),
        (True, Text("TRUE")),
        (date(2024, 5, 1), Text("2024-05-01")),
    ],
)
def test_cell_from_raw(raw, expected):
    assert cell_from_raw(raw) == expected


def test_cell_text():
    assert cell_text(Number(12.0)) == "12"
    assert cell_text(Number(12.5)) == "12.5"
    assert cell_text(Formula("A1", Number(3.0))) == "3"
    assert cell_text(Formula("A1", EMPTY)) == ""
    assert is_blank(Text("   "))
    assert not is_blank(Number(0.0))


def test_raw_row():
    row = RawRow(index=4, cells=(Text("a"), EMPTY))
    assert row.display_row == 5
    assert row.get(1) is EMPTY
    assert row.get(-1) is EMPTY
    assert not row.is_empty()
    assert RawRow(index=0, cells=(EMPTY, Text(" "))).is_empty()


def test_cell_style_and_merged_range():
    assert not CellStyle().is_struck
    assert CellStyle(run_strikes=(False, True)).is_struck
    rng = MergedRange(1, 2, 3, 4)
    assert rng.contains(1, 2) and rng.contains(3, 4)
    assert not rng.contains(0, 2)
    assert not rng.contains(2, 5)


def test_column_map_key_columns_order():
    columns = ColumnMap(
        header_row=0, quantity=5, unit_price=6, discounted_unit_price=7, description=4,
        total_price=8, segment_1=0, segment_2=1, segment_3=2, segment_4=3,
    )
    assert columns.key_columns == (0, 1, 2, 3, 4, 5, 6, 7)
    assert ColumnMap(header_row=0, quantity=2).key_columns == (2,)
