from __future__ import annotations

"""Exception hierarchy of the reconciliation engine.

Every exception here is fatal for the run that raised it; recoverable row
level problems are recorded in the Summary instead of being raised.
"""

__all__ = [
    "ReconciliationError",
    "SheetReadError",
    "MissingHeadersError",
    "MissingColumnsError",
    "SessionStateError",
]


class ReconciliationError(Exception):
    pass


class SheetReadError(ReconciliationError):
    """Raised when an input workbook is absent or cannot be read as a table."""


class MissingHeadersError(ReconciliationError):
    """Raised when mandatory order sheet headers are not found in the scan window."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"missing mandatory header(s) in order sheet: {', '.join(self.missing)}")


class MissingColumnsError(ReconciliationError):
    """Raised when the catalog sheet lacks its code or description column."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"catalog sheet missing column(s): {', '.join(self.missing)}")


class SessionStateError(ReconciliationError):
    """Raised on an operation that is invalid in the session's current state."""
