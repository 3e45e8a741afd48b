from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for refresh failure logging.

Only batch-level failures are recorded (the row source raised, returned
nothing, or the file was missing). Field-level parse failures are recovered
in the normalizer and never reach the error log.

Records are serialized as JSON Lines with a fixed key set.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Description of the row source (file path, sheet name)
        stage: Pipeline stage that failed (fetch / normalize / aggregate)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error message
    """
    timestamp: str  # ISO8601 UTC
    source: str
    stage: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, stage: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            stage=stage,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
