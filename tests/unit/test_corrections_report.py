from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
import yaml

from order_reconciler.models.cell import Number, Text
from order_reconciler.models.records import Corrections, UnresolvedRow
from order_reconciler.models.reconciliation_result import Summary, UntouchedCatalogRows
from order_reconciler.services.report import (
    CorrectionsFileError,
    load_corrections,
    untouched_frame,
    write_corrections_template,
    write_summary_json,
    write_untouched_csv,
)


def _summary(untouched_rows=()) -> Summary:
    return Summary(
        updated_rows=1,
        found_and_updated=("X01203",),
        not_found=(),
        duplicates=(),
        description_mismatches=(),
        skipped_strikethrough_rows=(),
        lumpsum_rows=(),
        included_rows=(),
        untouched_catalog_rows=UntouchedCatalogRows(headers=("Articolo", "Descrizione", ""), rows=untouched_rows),
        output_file="Database_AdHoc.xlsx",
    )


def test_corrections_normalize_and_drop_empty():
    c = Corrections({5: " x01-203 ", 2: "  ", 3: "a0050107"})
    assert dict(c) == {3: "A0050107", 5: "X01203"}
    assert list(c) == [3, 5]
    assert 2 not in c
    assert c == Corrections({3: "A0050107", 5: "X01203"})
    assert len(Corrections.empty()) == 0


def test_corrections_are_immutable():
    c = Corrections({1: "X01203"})
    with pytest.raises(TypeError):
        c[2] = "A00101"  # type: ignore[index]


def test_corrections_template_roundtrip(temp_workdir: Path):
    rows = [
        UnresolvedRow(row_index=8, display_row=9, segments=("", "12", "3", ""), description="Widget"),
        UnresolvedRow(row_index=10, display_row=11, segments=("Q", "x", "1", ""), description="Gear"),
    ]
    path = write_corrections_template(temp_workdir / "out" / "corrections.yml", rows)
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data["corrections"][0] == {
        "row_index": 8,
        "excel_row": 9,
        "segments": ["", "12", "3", ""],
        "description": "Widget",
        "code": "",
    }

    # fill in one code, leave the other empty
    data["corrections"][0]["code"] = "x01203"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    assert dict(load_corrections(path)) == {8: "X01203"}


def test_load_corrections_plain_mapping(temp_workdir: Path):
    path = temp_workdir / "c.yml"
    path.write_text("8: X01203\n10: ''\n", encoding="utf-8")
    assert dict(load_corrections(path)) == {8: "X01203"}


@pytest.mark.parametrize(
    "content",
    [
        "corrections: {a: 1}\n",
        "corrections:\n  - code: X01203\n",
        "- just\n- a list\n",
        "abc: X01203\n",
        "corrections: [unclosed\n",
    ],
)
def test_load_corrections_invalid(temp_workdir: Path, content: str):
    path = temp_workdir / "c.yml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CorrectionsFileError):
        load_corrections(path)


def test_load_corrections_missing_file(temp_workdir: Path):
    with pytest.raises(CorrectionsFileError) as e:
        load_corrections(temp_workdir / "nope.yml")
    assert "not found" in str(e.value)


def test_write_summary_json(temp_workdir: Path):
    path = write_summary_json(temp_workdir / "reports" / "summary.json", _summary())
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["updated_rows"] == 1
    assert data["found_and_updated"] == ["X01203"]
    assert data["output_file"] == "Database_AdHoc.xlsx"
    assert data["untouched_catalog_rows"]["rows"] == []


def test_untouched_csv(temp_workdir: Path):
    rows = ((Text("Z99901"), Text("Unused"), Number(5.0)), (Text("Z99902"),))
    summary = _summary(rows)
    frame = untouched_frame(summary)
    assert list(frame.columns) == ["Articolo", "Descrizione", "column_3"]
    assert frame.iloc[1].tolist() == ["Z99902", "", ""]

    path = write_untouched_csv(temp_workdir / "untouched.csv", summary)
    assert path is not None
    written = pd.read_csv(path, dtype=str, keep_default_na=False)
    assert written["Articolo"].tolist() == ["Z99901", "Z99902"]
    assert written["column_3"].tolist() == ["5", ""]


def test_untouched_csv_skipped_when_empty(temp_workdir: Path):
    assert write_untouched_csv(temp_workdir / "untouched.csv", _summary()) is None
    assert not (temp_workdir / "untouched.csv").exists()
