from __future__ import annotations

from pathlib import Path

import pytest

from order_reconciler.config.loader import ConfigError, config_from_dict, load_config
from order_reconciler.models.config_models import ReconcileConfig


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.header_scan_rows == 20
    assert cfg.order_headers.quantity == ("q.ty", "qty")
    # untouched sections keep their defaults
    assert cfg.order_headers.unit_price == ("unit pric",)
    assert cfg.catalog_headers.code == ("articolo",)
    assert cfg.price_sentinels == frozenset({"9999999"})
    assert cfg.output.file_name == "Database_AdHoc.xlsx"
    assert cfg.output.secondary_separator == " | "
    assert cfg.logs_directory == "./logs"


def test_empty_config_is_all_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "reconcile.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ReconcileConfig()


def test_labels_are_folded(temp_workdir: Path):
    cfg = config_from_dict({"order_headers": {"segment_1": ["  FAM "]}, "included_keywords": ["Gratis"]})
    assert cfg.order_headers.segment_1 == ("fam",)
    assert cfg.included_keywords == ("gratis",)


def test_segment_labels_folded_like_code_headers(temp_workdir: Path):
    cfg = config_from_dict(
        {"order_headers": {"segment_1": ["[L1]"], "segment_2": ["L 2"], "description": ["  Item   Text "]}}
    )
    assert cfg.order_headers.segment_1 == ("l1",)
    assert cfg.order_headers.segment_2 == ("l2",)
    assert cfg.order_headers.description == ("item text",)


def test_numeric_sentinels_become_text():
    cfg = config_from_dict({"price_sentinels": [9999999, "0,00"]})
    assert cfg.price_sentinels == frozenset({"9999999", "0,00"})


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError) as e:
        load_config(temp_workdir / "config" / "not_exists.yml")
    assert "config file not found" in str(e.value)


@pytest.mark.parametrize(
    "extra",
    [
        "extra_field: not_allowed\n",
        "header_scan_rows: 0\n",
        "order_headers:\n  unknown: [x]\n",
        "order_headers:\n  quantity: []\n",
        "output:\n  sheet_name: this-sheet-name-is-longer-than-31-chars\n",
    ],
)
def test_load_config_schema_violations(temp_workdir: Path, extra: str):
    path = temp_workdir / "config" / "reconcile.yml"
    path.write_text(extra, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "config validation failed" in str(e.value)


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "reconcile.yml"
    path.write_text("order_headers: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "invalid yaml" in str(e.value)


def test_load_config_top_level_list(temp_workdir: Path):
    path = temp_workdir / "config" / "reconcile.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_shipped_example_config_is_valid():
    example = Path(__file__).resolve().parents[2] / "config" / "reconcile.yml"
    assert load_config(example) == ReconcileConfig()
