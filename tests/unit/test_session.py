from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from order_reconciler.errors import MissingColumnsError, MissingHeadersError, SessionStateError, SheetReadError
from order_reconciler.logging.anomaly_log import AnomalyLogBuffer
from order_reconciler.models.records import Corrections
from order_reconciler.services.session import ReconciliationSession, SessionState

UNRESOLVED_ROW = ["", "12", "3", "", "Widget without family", 2, 10, None, None]


def _session(order_workbook, catalog_workbook, order_rows, catalog_rows, **kwargs) -> ReconciliationSession:
    return ReconciliationSession(
        order_workbook(order_rows),
        catalog_workbook(catalog_rows),
        **kwargs,
    )


def test_start_without_unresolved_rows_goes_straight_to_done(
    order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows
):
    session = _session(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows)
    assert session.state is SessionState.SCANNING
    outcome = session.start()
    assert outcome.state is SessionState.DONE
    assert not outcome.awaiting_corrections
    assert outcome.result is session.result
    assert outcome.result.summary.updated_rows == 3
    assert session.columns.header_row == 2


def test_start_stops_for_corrections(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows):
    session = _session(order_workbook, catalog_workbook, [*sample_order_rows, UNRESOLVED_ROW], sample_catalog_rows)
    outcome = session.start()
    assert outcome.awaiting_corrections
    assert session.state is SessionState.AWAITING_CORRECTIONS
    assert outcome.result is None
    assert [r.display_row for r in outcome.unresolved_rows] == [9]


def test_resume_with_corrections(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows):
    session = _session(order_workbook, catalog_workbook, [*sample_order_rows, UNRESOLVED_ROW], sample_catalog_rows)
    row = session.start().unresolved_rows[0]
    outcome = session.resume({row.row_index: "z99901"})
    assert outcome.state is SessionState.DONE
    summary = outcome.result.summary
    assert "Z99901" in summary.found_and_updated
    assert summary.untouched_catalog_rows.rows == ()
    assert not any("skipped" in a for a in summary.assumptions)


def test_resume_with_empty_corrections_skips_rows(
    order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows
):
    anomalies = AnomalyLogBuffer()
    session = _session(
        order_workbook, catalog_workbook, [*sample_order_rows, UNRESOLVED_ROW], sample_catalog_rows,
        anomalies=anomalies,
    )
    session.start()
    outcome = session.resume(Corrections.empty())
    summary = outcome.result.summary
    assert summary.updated_rows == 3
    assert summary.assumptions[-1].startswith("1 order row(s) without a constructible code")
    assert "UNRESOLVED_SKIPPED" in [r.anomaly_type for r in anomalies.records]

    skipped_index, skipped_display = 8, 9
    assert skipped_index not in [r.source_row for r in outcome.result.output_rows]
    assert summary.not_found == ("C00909",)
    assert skipped_display not in [s.display_row for s in summary.skipped_strikethrough_rows]
    flagged_cells = [f.cell for f in (*summary.lumpsum_rows, *summary.included_rows)]
    assert not any(cell[1:] == str(skipped_display) for cell in flagged_cells)


def test_resume_none_is_empty_corrections(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows):
    session = _session(order_workbook, catalog_workbook, [*sample_order_rows, UNRESOLVED_ROW], sample_catalog_rows)
    session.start()
    assert session.resume(None).result.summary.updated_rows == 3


def test_invalid_transitions(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows):
    session = _session(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows)
    with pytest.raises(SessionStateError):
        session.resume(Corrections.empty())
    session.start()
    with pytest.raises(SessionStateError) as e:
        session.start()
    assert "state 'done'" in str(e.value)


def test_missing_headers_is_fatal(order_workbook, catalog_workbook, sample_catalog_rows):
    data = order_workbook([["X", "12", "3"]], headers=["L1", "L2", "L3", "Description"])
    session = ReconciliationSession(data, catalog_workbook(sample_catalog_rows))
    with pytest.raises(MissingHeadersError) as e:
        session.start()
    assert "quantity" in e.value.missing
    assert session.state is SessionState.SCANNING


def test_catalog_without_code_column_is_fatal(order_workbook, catalog_workbook, sample_order_rows):
    session = ReconciliationSession(
        order_workbook(sample_order_rows),
        catalog_workbook([["X01203", "Widget"]], headers=["Code", "Text"]),
    )
    with pytest.raises(MissingColumnsError):
        session.start()


def test_unreadable_catalog_keeps_session_resumable(
    order_workbook, sample_order_rows
):
    session = ReconciliationSession(
        order_workbook([*sample_order_rows, UNRESOLVED_ROW]),
        b"definitely not xlsx",
        catalog_file="broken.xlsx",
    )
    session.start()
    with pytest.raises(SheetReadError) as e:
        session.resume(Corrections.empty())
    assert "catalog sheet (broken.xlsx)" in str(e.value)
    assert session.state is SessionState.AWAITING_CORRECTIONS


def test_reconcile_reports_running_counts_on_progress_bar(
    order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows
):
    mock_pbar = Mock()
    session = _session(order_workbook, catalog_workbook, sample_order_rows, sample_catalog_rows)
    with patch("order_reconciler.services.progress.is_tty_enabled", return_value=True), \
         patch("order_reconciler.services.progress.tqdm", return_value=mock_pbar):
        session.start()
    assert mock_pbar.set_postfix.call_args_list[-1].kwargs == {"refresh": False, "emitted": 3, "not_found": 1}
    mock_pbar.close.assert_called_once()
