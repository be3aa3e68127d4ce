from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import pandas as pd
import yaml

from ..excel.reader import sheet_to_frame
from ..models.cell import cell_text
from ..models.reconciliation_result import Summary
from ..models.records import Corrections, UnresolvedRow

"""File artifacts around a reconciliation run.

- corrections template (YAML) written when a run stops for corrections
- corrections file loading (row_index -> code)
- summary report (JSON) and untouched catalog rows (CSV, via pandas)
"""

__all__ = [
    "CorrectionsFileError",
    "write_corrections_template",
    "load_corrections",
    "write_summary_json",
    "untouched_frame",
    "write_untouched_csv",
]


class CorrectionsFileError(Exception):
    pass


def write_corrections_template(path: Path, rows: Iterable[UnresolvedRow]) -> Path:
    """Write one entry per unresolved row with an empty `code` to fill in."""
    entries = [
        {
            "row_index": r.row_index,
            "excel_row": r.display_row,
            "segments": list(r.segments),
            "description": r.description,
            "code": "",
        }
        for r in rows
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump({"corrections": entries}, allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )
    return path


def load_corrections(path: Path) -> Corrections:
    """Read a corrections YAML file; entries with an empty code are dropped.

    Accepts either the template layout (`corrections: [{row_index, code}, ...]`)
    or a plain `row_index: code` mapping.
    """
    if not path.exists():
        raise CorrectionsFileError(f"corrections file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise CorrectionsFileError(f"invalid yaml: {e}") from e

    entries: dict[int, str] = {}
    if isinstance(data, dict) and "corrections" in data:
        items = data["corrections"] or []
        if not isinstance(items, list):
            raise CorrectionsFileError("'corrections' must be a list")
        for item in items:
            if not isinstance(item, dict) or "row_index" not in item:
                raise CorrectionsFileError(f"invalid corrections entry: {item!r}")
            entries[int(item["row_index"])] = str(item.get("code") or "")
    elif isinstance(data, dict):
        try:
            entries = {int(k): str(v or "") for k, v in data.items()}
        except (TypeError, ValueError) as e:
            raise CorrectionsFileError(f"invalid corrections mapping: {e}") from e
    else:
        raise CorrectionsFileError("corrections file must contain a mapping")
    return Corrections(entries)


def write_summary_json(path: Path, summary: Summary) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def untouched_frame(summary: Summary) -> pd.DataFrame:
    untouched = summary.untouched_catalog_rows
    rows = [[cell_text(c) for c in row] for row in untouched.rows]
    return sheet_to_frame(untouched.headers, rows)


def write_untouched_csv(path: Path, summary: Summary) -> Path | None:
    """Write untouched catalog rows; nothing is written when there are none."""
    if not summary.untouched_catalog_rows.rows:
        return None
    frame = untouched_frame(summary)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False, encoding="utf-8")
    return path

