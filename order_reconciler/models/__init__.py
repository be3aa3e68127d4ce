"""Domain models for the order / catalog reconciliation engine."""

from .anomaly_record import AnomalyRecord
from .cell import EMPTY, CellValue, Empty, Formula, Number, Text
from .column_map import ColumnMap
from .config_models import CatalogHeaderLabels, OrderHeaderLabels, OutputConfig, ReconcileConfig
from .output import CellKind, OutputCell, OutputRow, OutputTable
from .reconciliation_result import ReconciliationResult, Summary
from .records import CatalogRecord, Classification, Corrections, PricingState, UnresolvedRow
from .sheet import CellStyle, MergedRange, RawRow, Sheet

__all__ = [
    # Cells and sheets
    "CellValue",
    "Empty",
    "EMPTY",
    "Number",
    "Text",
    "Formula",
    "RawRow",
    "CellStyle",
    "MergedRange",
    "Sheet",
    "ColumnMap",
    # Records
    "PricingState",
    "UnresolvedRow",
    "Corrections",
    "CatalogRecord",
    "Classification",
    # Output
    "CellKind",
    "OutputCell",
    "OutputRow",
    "OutputTable",
    "Summary",
    "ReconciliationResult",
    "AnomalyRecord",
    # Configuration
    "ReconcileConfig",
    "OrderHeaderLabels",
    "CatalogHeaderLabels",
    "OutputConfig",
]
