from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from order_reconciler.cli import main as cli_main

"""Anomaly log JSON Lines contract."""

SCHEMA_PATH = Path(__file__).with_name("anomaly_log_schema.json")


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_anomaly_log_schema_valid_example():
    record = {
        "timestamp": "2026-10-19T10:12:33.123456Z",
        "file": "offerta.xlsx",
        "sheet": "Offerta",
        "row": 7,
        "anomaly_type": "CODE_NOT_FOUND",
        "message": "code C00909 not found in catalog",
    }
    jsonschema.validate(record, _schema())


def test_anomaly_log_schema_rejects_extra_key():
    record = {
        "timestamp": "2026-10-19T10:12:33Z",
        "file": "offerta.xlsx",
        "sheet": "Offerta",
        "row": 7,
        "anomaly_type": "CODE_NOT_FOUND",
        "message": "x",
        "extra": "not allowed",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, _schema())


def test_anomaly_log_written_by_cli_matches_schema(temp_workdir: Path, order_workbook, catalog_workbook,
                                                   sample_order_rows, sample_catalog_rows, capsys):
    order = temp_workdir / "data" / "offerta.xlsx"
    catalog = temp_workdir / "data" / "catalogo.xlsx"
    rows = [*sample_order_rows, ["", "99", "1", "", "Spare part", 1, 5, None, None]]
    order.write_bytes(order_workbook(rows, struck=["E5"]))
    catalog.write_bytes(catalog_workbook(sample_catalog_rows))

    cli_main([str(order), str(catalog), "--skip-unresolved"])
    capsys.readouterr()

    (log_file,) = (temp_workdir / "logs").glob("anomalies-*.log")
    schema = _schema()
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    for record in records:
        jsonschema.validate(record, schema)
    assert {r["anomaly_type"] for r in records} == {
        "CODE_NOT_FOUND",
        "DUPLICATE_CATALOG_CODE",
        "DESCRIPTION_MISMATCH",
        "STRIKETHROUGH_SKIPPED",
        "UNRESOLVED_SKIPPED",
    }
    unresolved = next(r for r in records if r["anomaly_type"] == "UNRESOLVED_SKIPPED")
    assert unresolved["row"] == 9
    assert unresolved["file"] == "offerta.xlsx"
