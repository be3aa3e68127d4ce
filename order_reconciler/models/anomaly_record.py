from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""AnomalyRecord model for the anomaly log.

Recoverable anomalies (code not found, duplicate catalog code, struck row,
skipped unresolved row, description mismatch) never abort a run; each one is
recorded as a JSON Lines entry for later audit. row=-1 marks anomalies that
are not tied to a single order row.
"""

__all__ = [
    "AnomalyRecord",
]


@dataclass(frozen=True)
class AnomalyRecord:
    """Structured anomaly record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: input file name
        sheet: sheet name within the file
        row: 1-based spreadsheet row, -1 when unknown
        anomaly_type: classification in UPPER_SNAKE_CASE
        message: human readable detail
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    anomaly_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, anomaly_type: str, message: str) -> AnomalyRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return AnomalyRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            anomaly_type=anomaly_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
