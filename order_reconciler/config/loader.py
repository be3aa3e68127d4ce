from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    CatalogHeaderLabels,
    OrderHeaderLabels,
    OutputConfig,
    ReconcileConfig,
)
from ..services.normalizers import normalize_code_header, normalize_header

"""Config loader.

Responsibilities:
- Load the YAML config (config/reconcile.yml by default)
- Validate it against the packaged JSON schema
- Apply defaults for every omitted key
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/reconcile.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or malformed, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _labels(section: dict[str, Any], defaults: Any) -> dict[str, tuple[str, ...]]:
    # Labels are compared against folded header text, so fold them the same way.
    folded: dict[str, tuple[str, ...]] = {}
    for key, values in section.items():
        if not hasattr(defaults, key):
            continue
        fold = normalize_code_header if key.startswith("segment_") else normalize_header
        folded[key] = tuple(fold(str(v)) for v in values)
    return folded


def config_from_dict(data: dict[str, Any]) -> ReconcileConfig:
    """Build a ReconcileConfig from already validated data."""
    defaults = ReconcileConfig()
    kwargs: dict[str, Any] = {}
    if "header_scan_rows" in data:
        kwargs["header_scan_rows"] = int(data["header_scan_rows"])
    if "order_headers" in data:
        kwargs["order_headers"] = OrderHeaderLabels(**_labels(data["order_headers"], defaults.order_headers))
    if "catalog_headers" in data:
        kwargs["catalog_headers"] = CatalogHeaderLabels(
            **_labels(data["catalog_headers"], defaults.catalog_headers)
        )
    if "price_sentinels" in data:
        kwargs["price_sentinels"] = frozenset(str(v).strip() for v in data["price_sentinels"])
    if "included_keywords" in data:
        kwargs["included_keywords"] = tuple(str(v).strip().lower() for v in data["included_keywords"])
    if "output" in data:
        kwargs["output"] = OutputConfig(**data["output"])
    if "logs_directory" in data:
        kwargs["logs_directory"] = data["logs_directory"]
    return ReconcileConfig(**kwargs)


def load_config(path: Path) -> ReconcileConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)
    return config_from_dict(data)
