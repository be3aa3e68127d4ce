from __future__ import annotations

from ..models.reconciliation_result import Summary

"""SUMMARY line rendering.

Format:
SUMMARY updated={n} not_found={n} duplicates={n} mismatches={n} struck={n}
lumpsum={n} included={n} untouched={n} output={file}
"""


def render_summary_line(summary: Summary) -> str:
    """Render the one-line SUMMARY for a finished run.

    Examples:
        >>> from order_reconciler.models.reconciliation_result import UntouchedCatalogRows
        >>> s = Summary(
        ...     updated_rows=2, found_and_updated=("A00101", "A00102"), not_found=("B00101",),
        ...     duplicates=(), description_mismatches=(), skipped_strikethrough_rows=(),
        ...     lumpsum_rows=(), included_rows=(), untouched_catalog_rows=UntouchedCatalogRows(headers=()),
        ...     output_file="Database_AdHoc.xlsx",
        ... )
        >>> render_summary_line(s)  # doctest: +ELLIPSIS
        'SUMMARY updated=2 not_found=1 duplicates=0 ... output=Database_AdHoc.xlsx'
    """
    return (
        f"SUMMARY updated={summary.updated_rows} "
        f"not_found={len(summary.not_found)} "
        f"duplicates={len(summary.duplicates)} "
        f"mismatches={len(summary.description_mismatches)} "
        f"struck={len(summary.skipped_strikethrough_rows)} "
        f"lumpsum={len(summary.lumpsum_rows)} "
        f"included={len(summary.included_rows)} "
        f"untouched={len(summary.untouched_catalog_rows.rows)} "
        f"output={summary.output_file}"
    )
