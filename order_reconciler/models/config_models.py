from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the reconciliation engine.

Defaults reproduce the built-in header labels and value conventions, so the
engine runs without a YAML file; config/loader.py turns a validated YAML
document into these objects.
"""

__all__ = [
    "OrderHeaderLabels",
    "CatalogHeaderLabels",
    "OutputConfig",
    "ReconcileConfig",
]


@dataclass(frozen=True)
class OrderHeaderLabels:
    """Label fragments searched for in the order sheet header cells.

    Text labels are matched as substrings of the whitespace/case folded
    header; segment codes must equal the bracket/space stripped header.
    """
    quantity: tuple[str, ...] = ("q.ty",)
    unit_price: tuple[str, ...] = ("unit pric",)
    unit_price_exclude: tuple[str, ...] = ("discounted",)
    discounted_unit_price: tuple[str, ...] = ("discounted unit price",)
    description: tuple[str, ...] = ("description",)
    total_price: tuple[str, ...] = ("total pr", "total price")
    segment_1: tuple[str, ...] = ("l1",)
    segment_2: tuple[str, ...] = ("l2",)
    segment_3: tuple[str, ...] = ("l3",)
    segment_4: tuple[str, ...] = ("l4",)


@dataclass(frozen=True)
class CatalogHeaderLabels:
    code: tuple[str, ...] = ("article", "articolo")
    description: tuple[str, ...] = ("description", "descrizione", "descriz")


@dataclass(frozen=True)
class OutputConfig:
    sheet_name: str = "Database_AdHoc"
    file_name: str = "Database_AdHoc.xlsx"
    secondary_separator: str = " | "


@dataclass(frozen=True)
class ReconcileConfig:
    """Root configuration object for one reconciliation run."""
    header_scan_rows: int = 20
    order_headers: OrderHeaderLabels = field(default_factory=OrderHeaderLabels)
    catalog_headers: CatalogHeaderLabels = field(default_factory=CatalogHeaderLabels)
    price_sentinels: frozenset[str] = frozenset({"9999999", "9999999999"})
    included_keywords: tuple[str, ...] = ("included", "incl.", "incl", "includi", "incluso")
    output: OutputConfig = field(default_factory=OutputConfig)
    logs_directory: str = "./logs"
