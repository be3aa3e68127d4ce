from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from openpyxl.utils import get_column_letter

from ..errors import SessionStateError
from ..excel.codec import OpenpyxlCodec, SpreadsheetCodec
from ..excel.reader import locate_catalog_columns, read_sheet
from ..logging.anomaly_log import AnomalyLogBuffer
from ..models.anomaly_record import AnomalyRecord
from ..models.cell import Formula, Text, cell_text, is_blank
from ..models.column_map import ColumnMap
from ..models.config_models import ReconcileConfig
from ..models.output import OutputRow
from ..models.reconciliation_result import (
    DescriptionMismatch,
    FlaggedRowInfo,
    MissingValueInfo,
    ReconciliationResult,
    SkippedRowInfo,
    Summary,
    TextValueInfo,
    UntouchedCatalogRows,
)
from ..models.records import Corrections, PricingState, UnresolvedRow
from ..models.sheet import RawRow, Sheet
from .catalog_index import CatalogIndex, build_catalog_index
from .classifier import classify_row
from .header_locator import locate_headers
from .identifier import construct_code
from .normalizers import descriptions_match, included_pattern, parse_price, parse_quantity
from .output_builder import OUTPUT_ASSUMPTIONS, build_output_row, build_output_table
from .progress import ProgressTracker
from .strikethrough import StrikethroughDetector

"""Two-phase reconciliation session.

Phase 1 (scan) finds order rows that carry a description but whose L1..L4
segments do not produce an article code. When there are any, the session
stops in AWAITING_CORRECTIONS and hands them to the caller. Phase 2 (resume)
takes a Corrections map (empty means "skip them all") and reconciles every
order row against the catalog, in ascending row order.

States: SCANNING -> AWAITING_CORRECTIONS -> RECONCILING -> DONE
        SCANNING -> RECONCILING -> DONE (nothing to correct)
"""

__all__ = [
    "SessionState",
    "SessionOutcome",
    "ReconciliationSession",
    "scan_unresolved",
    "reconcile",
]

logger = logging.getLogger(__name__)

NO_CODE_PLACEHOLDER = "N/A"
STRIKETHROUGH_REASON = "strikethrough"


class SessionState(Enum):
    SCANNING = "scanning"
    AWAITING_CORRECTIONS = "awaiting_corrections"
    RECONCILING = "reconciling"
    DONE = "done"


@dataclass(frozen=True)
class SessionOutcome:
    state: SessionState
    unresolved_rows: tuple[UnresolvedRow, ...] = ()
    result: ReconciliationResult | None = None

    @property
    def awaiting_corrections(self) -> bool:
        return self.state is SessionState.AWAITING_CORRECTIONS


def _cell_ref(row_index: int, col: int) -> str:
    if col < 0:
        return NO_CODE_PLACEHOLDER
    return f"{get_column_letter(col + 1)}{row_index + 1}"


def _segments(row: RawRow, columns: ColumnMap) -> list:
    return [row.get(c) for c in columns.segments]


def _data_rows(sheet: Sheet, columns: ColumnMap) -> tuple[RawRow, ...]:
    return sheet.rows[columns.header_row + 1:]


def scan_unresolved(sheet: Sheet, columns: ColumnMap) -> tuple[UnresolvedRow, ...]:
    """Phase 1: rows with a description but no constructible code.

    Rows whose four segments are all blank (section headings, notes) are not
    candidates; strikethrough is not considered here.
    """
    unresolved: list[UnresolvedRow] = []
    for row in _data_rows(sheet, columns):
        if row.is_empty():
            continue
        segments = _segments(row, columns)
        if all(is_blank(s) for s in segments):
            continue
        description = cell_text(row.get(columns.description)).strip()
        if construct_code(segments) is None and description:
            unresolved.append(
                UnresolvedRow(
                    row_index=row.index,
                    display_row=row.display_row,
                    segments=tuple(cell_text(s).strip() for s in segments),  # type: ignore[arg-type]
                    description=description,
                )
            )
    return tuple(unresolved)


def _is_text_value(cell: object) -> bool:
    if isinstance(cell, Formula):
        cell = cell.cached
    return isinstance(cell, Text) and cell.value.strip() != ""


class _RunObserver:
    """Collects the observations of one reconciliation pass."""

    def __init__(self, anomalies: AnomalyLogBuffer | None, order_file: str, order_sheet: str) -> None:
        self.anomalies = anomalies
        self.order_file = order_file
        self.order_sheet = order_sheet
        self.found: list[str] = []
        self.not_found: list[str] = []
        self.mismatches: list[DescriptionMismatch] = []
        self.struck: list[SkippedRowInfo] = []
        self.lumpsum: list[tuple[str, int, str]] = []
        self.included: list[tuple[str, int, str]] = []
        self.text_values: list[TextValueInfo] = []
        self.missing_values: list[MissingValueInfo] = []
        self.seen_codes: set[str] = set()

    def anomaly(self, row: int, anomaly_type: str, message: str, *, file: str | None = None, sheet: str | None = None) -> None:
        if self.anomalies is None:
            return
        self.anomalies.append(
            AnomalyRecord.create(
                file=file or self.order_file,
                sheet=sheet or self.order_sheet,
                row=row,
                anomaly_type=anomaly_type,
                message=message,
            )
        )


def reconcile(
    order_sheet: Sheet,
    catalog_sheet: Sheet,
    corrections: Corrections | None = None,
    *,
    codec: SpreadsheetCodec | None = None,
    config: ReconcileConfig | None = None,
    columns: ColumnMap | None = None,
    job_reference: str | None = None,
    anomalies: AnomalyLogBuffer | None = None,
    order_file: str = "order.xlsx",
    catalog_file: str = "catalog.xlsx",
    extra_assumptions: tuple[str, ...] = (),
) -> ReconciliationResult:
    """Phase 2: reconcile every order data row against the catalog.

    Deterministic: output order follows the order sheet rows, and the same
    inputs with the same corrections always produce the same result.
    """
    codec = codec or OpenpyxlCodec()
    config = config or ReconcileConfig()
    corrections = corrections or Corrections.empty()
    if columns is None:
        columns = locate_headers(
            order_sheet, labels=config.order_headers, scan_rows=config.header_scan_rows
        )

    code_col, desc_col = locate_catalog_columns(catalog_sheet, config.catalog_headers)
    index = build_catalog_index(catalog_sheet, code_col, desc_col)

    detector = StrikethroughDetector(codec, order_sheet)
    included_re = included_pattern(config.included_keywords)
    observer = _RunObserver(anomalies, order_file, order_sheet.name)

    for code in sorted(index.duplicates):
        observer.anomaly(-1, "DUPLICATE_CATALOG_CODE", f"code {code} appears more than once; first row kept",
                         file=catalog_file, sheet=catalog_sheet.name)

    key_columns = columns.key_columns
    output_rows: list[OutputRow] = []
    data_rows = _data_rows(order_sheet, columns)

    with ProgressTracker(len(data_rows), description="Reconciling rows") as progress:
        for row in data_rows:
            progress.advance()
            if row.is_empty():
                continue

            code = corrections.get(row.index) or construct_code(_segments(row, columns))

            if detector.is_row_struck(row.index, key_columns):
                observer.struck.append(
                    SkippedRowInfo(
                        display_row=row.display_row,
                        article=code or NO_CODE_PLACEHOLDER,
                        reason=STRIKETHROUGH_REASON,
                    )
                )
                observer.anomaly(row.display_row, "STRIKETHROUGH_SKIPPED", f"row struck through (code {code or NO_CODE_PLACEHOLDER})")
                logger.info("row=%d struck through, skipped (code %s)", row.display_row, code or NO_CODE_PLACEHOLDER)
                continue

            if not code:
                continue

            output_row = _reconcile_row(row, code, columns, index, config, included_re, job_reference, observer)
            if output_row is not None:
                output_rows.append(output_row)
            progress.set_postfix(emitted=len(output_rows), not_found=len(observer.not_found))

    summary = _build_summary(observer, index, catalog_sheet, config, extra_assumptions)
    table = build_output_table(output_rows, sheet_name=config.output.sheet_name)
    workbook = codec.write_workbook(table)
    logger.info(
        "reconciled order rows: emitted=%d not_found=%d struck=%d included=%d",
        len(output_rows),
        len(observer.not_found),
        len(observer.struck),
        len(observer.included),
    )
    return ReconciliationResult(summary=summary, output_rows=tuple(output_rows), table=table, workbook=workbook)


def _reconcile_row(
    row: RawRow,
    code: str,
    columns: ColumnMap,
    index: CatalogIndex,
    config: ReconcileConfig,
    included_re: re.Pattern[str],
    job_reference: str | None,
    observer: _RunObserver,
) -> OutputRow | None:
    quantity_cell = row.get(columns.quantity)
    price_cell = row.get(columns.unit_price)

    unit_price = parse_price(price_cell, sentinels=config.price_sentinels, included=included_re)
    discounted_price = parse_price(
        row.get(columns.discounted_unit_price), sentinels=config.price_sentinels, included=included_re
    )
    classification = classify_row(unit_price, discounted_price, parse_quantity(quantity_cell))

    record = index.lookup(code)
    if record is None:
        observer.not_found.append(code)
        observer.anomaly(row.display_row, "CODE_NOT_FOUND", f"code {code} not found in catalog")
        logger.warning("row=%d code %s not found in catalog", row.display_row, code)
        return None

    observer.seen_codes.add(record.code)
    if _is_text_value(quantity_cell):
        observer.text_values.append(TextValueInfo(code, "quantity", cell_text(quantity_cell).strip()))
    if _is_text_value(price_cell):
        observer.text_values.append(TextValueInfo(code, "unit_price", cell_text(price_cell).strip()))

    if classification.state is PricingState.INCLUDED:
        observer.included.append((code, row.index, _cell_ref(row.index, columns.unit_price)))
        return None
    if classification.state is PricingState.LUMPSUM:
        observer.lumpsum.append((code, row.index, _cell_ref(row.index, columns.quantity)))

    order_description = cell_text(row.get(columns.description)).strip()
    if not descriptions_match(order_description, record.description):
        observer.mismatches.append(DescriptionMismatch(code, record.description, order_description))
        observer.anomaly(
            row.display_row,
            "DESCRIPTION_MISMATCH",
            f"code {code}: catalog '{record.description}' vs order '{order_description}'",
        )

    if is_blank(quantity_cell):
        observer.missing_values.append(MissingValueInfo(code, "quantity"))
    if is_blank(price_cell):
        observer.missing_values.append(MissingValueInfo(code, "unit_price"))

    observer.found.append(code)
    return build_output_row(
        code=record.raw_code or record.code,
        catalog_description=record.description,
        order_description=order_description,
        classification=classification,
        job_reference=job_reference,
        source_row=row.index,
        separator=config.output.secondary_separator,
    )


def _build_summary(
    observer: _RunObserver,
    index: CatalogIndex,
    catalog_sheet: Sheet,
    config: ReconcileConfig,
    extra_assumptions: tuple[str, ...],
) -> Summary:
    untouched = tuple(r.raw for r in index.coded_rows if r.code not in observer.seen_codes)
    return Summary(
        updated_rows=len(observer.found),
        found_and_updated=tuple(sorted(observer.found)),
        not_found=tuple(sorted(observer.not_found)),
        duplicates=tuple(sorted(index.duplicates)),
        description_mismatches=tuple(observer.mismatches),
        skipped_strikethrough_rows=tuple(observer.struck),
        lumpsum_rows=tuple(FlaggedRowInfo(code, ref) for code, _, ref in sorted(observer.lumpsum)),
        included_rows=tuple(FlaggedRowInfo(code, ref) for code, _, ref in sorted(observer.included)),
        untouched_catalog_rows=UntouchedCatalogRows(headers=index.headers, rows=untouched),
        text_values_detected=tuple(observer.text_values),
        missing_values_replaced=tuple(observer.missing_values),
        assumptions=OUTPUT_ASSUMPTIONS + tuple(extra_assumptions),
        output_file=config.output.file_name,
    )


class ReconciliationSession:
    """Explicit state machine around scan_unresolved() and reconcile().

    Each session owns its inputs and results; sessions never share state.
    """

    def __init__(
        self,
        order_data: bytes,
        catalog_data: bytes,
        *,
        codec: SpreadsheetCodec | None = None,
        config: ReconcileConfig | None = None,
        job_reference: str | None = None,
        anomalies: AnomalyLogBuffer | None = None,
        order_file: str = "order.xlsx",
        catalog_file: str = "catalog.xlsx",
    ) -> None:
        self._order_data = order_data
        self._catalog_data = catalog_data
        self._codec = codec or OpenpyxlCodec()
        self._config = config or ReconcileConfig()
        self._job_reference = job_reference
        self._anomalies = anomalies
        self._order_file = order_file
        self._catalog_file = catalog_file

        self._state = SessionState.SCANNING
        self._order_sheet: Sheet | None = None
        self._columns: ColumnMap | None = None
        self._unresolved: tuple[UnresolvedRow, ...] = ()
        self._result: ReconciliationResult | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def unresolved_rows(self) -> tuple[UnresolvedRow, ...]:
        return self._unresolved

    @property
    def columns(self) -> ColumnMap | None:
        return self._columns

    @property
    def result(self) -> ReconciliationResult | None:
        return self._result

    def start(self) -> SessionOutcome:
        """Run Phase 1; reconcile straight away when nothing needs correcting."""
        self._require(SessionState.SCANNING, "start")
        order_sheet = read_sheet(self._order_data, self._codec, f"order sheet ({self._order_file})")
        columns = locate_headers(
            order_sheet,
            labels=self._config.order_headers,
            scan_rows=self._config.header_scan_rows,
        )
        self._order_sheet = order_sheet
        self._columns = columns
        self._unresolved = scan_unresolved(order_sheet, columns)

        if self._unresolved:
            self._state = SessionState.AWAITING_CORRECTIONS
            logger.warning("%d order row(s) need a code correction", len(self._unresolved))
            for row in self._unresolved:
                logger.info(
                    "unresolved row=%d segments=%s description=%s",
                    row.display_row,
                    "-".join(row.segments),
                    row.description,
                )
            return SessionOutcome(state=self._state, unresolved_rows=self._unresolved)

        return self._run(Corrections.empty())

    def resume(self, corrections: Corrections | Mapping[int, str] | None = None) -> SessionOutcome:
        """Run Phase 2 with the caller's corrections (None or empty skips every unresolved row)."""
        self._require(SessionState.AWAITING_CORRECTIONS, "resume")
        if corrections is None:
            corrections = Corrections.empty()
        elif not isinstance(corrections, Corrections):
            corrections = Corrections(corrections)
        return self._run(corrections)

    def _run(self, corrections: Corrections) -> SessionOutcome:
        assert self._order_sheet is not None and self._columns is not None
        self._state = SessionState.RECONCILING
        skipped = [r for r in self._unresolved if r.row_index not in corrections]
        for row in skipped:
            if self._anomalies is not None:
                self._anomalies.append(
                    AnomalyRecord.create(
                        file=self._order_file,
                        sheet=self._order_sheet.name,
                        row=row.display_row,
                        anomaly_type="UNRESOLVED_SKIPPED",
                        message=f"no code for segments {'-'.join(row.segments)}; row skipped",
                    )
                )
        extra = ()
        if skipped:
            extra = (f"{len(skipped)} order row(s) without a constructible code and no correction were skipped.",)

        try:
            catalog_sheet = read_sheet(self._catalog_data, self._codec, f"catalog sheet ({self._catalog_file})")
            result = reconcile(
                self._order_sheet,
                catalog_sheet,
                corrections,
                codec=self._codec,
                config=self._config,
                columns=self._columns,
                job_reference=self._job_reference,
                anomalies=self._anomalies,
                order_file=self._order_file,
                catalog_file=self._catalog_file,
                extra_assumptions=extra,
            )
        except Exception:
            # Leave the session resumable after a fatal input error.
            self._state = SessionState.AWAITING_CORRECTIONS if self._unresolved else SessionState.SCANNING
            raise
        self._result = result
        self._state = SessionState.DONE
        return SessionOutcome(state=self._state, unresolved_rows=self._unresolved, result=result)

    def _require(self, expected: SessionState, operation: str) -> None:
        if self._state is not expected:
            raise SessionStateError(
                f"cannot {operation} a session in state '{self._state.value}' (expected '{expected.value}')"
            )
