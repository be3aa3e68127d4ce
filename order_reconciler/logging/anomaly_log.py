from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.anomaly_record import AnomalyRecord

"""Anomaly log buffering.

- JSON Lines, fixed schema (see AnomalyRecord)
- one `anomalies-YYYYMMDD-HHMMSS.log` file (UTC) per process, created on first flush
- records are buffered during a run and written in one go
"""

__all__ = [
    "AnomalyRecord",
    "AnomalyLogBuffer",
]

DEFAULT_LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class AnomalyLogBuffer:
    """In-memory buffer for anomaly records. flush() appends JSON Lines to disk.

    Not thread safe; a run is single threaded.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[AnomalyRecord] = []
        self._logs_dir = logs_dir or DEFAULT_LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"anomalies-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> tuple[AnomalyRecord, ...]:
        return tuple(self._records)

    def append(self, record: AnomalyRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
