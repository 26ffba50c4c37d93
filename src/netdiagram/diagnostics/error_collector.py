"""Error and warning collection for a single netdiagram run."""

import json
import logging
import traceback
import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    CRITICAL = "critical"  # Run aborted
    ERROR = "error"        # Operation failed
    WARNING = "warning"    # Input was corrected or a fallback was used
    INFO = "info"


@dataclass
class ErrorContext:
    """Where a diagnostic was raised."""
    operation: str                      # e.g. "load_nodes", "serialize"
    component: str                      # e.g. "NodeRepository"
    node_id: str | None = None
    row: int | None = None
    additional_context: dict[str, Any] | None = None


@dataclass
class DiagnosticEntry:
    """A single collected diagnostic."""
    entry_id: str
    run_id: str
    timestamp: str
    severity: ErrorSeverity
    error_type: str
    message: str
    context: dict[str, Any]
    traceback_lines: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "severity": self.severity.value,
            "error_type": self.error_type,
            "message": self.message,
            "context": self.context,
            "traceback_lines": self.traceback_lines,
        }


@dataclass
class DiagnosticSummary:
    """Summary of all diagnostics for one run."""
    run_id: str
    command: str
    started_at: str
    completed_at: str
    duration_seconds: float
    total: int
    by_severity: dict[str, int]
    entries: list[DiagnosticEntry]

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": "1.0.0",
            "run_id": self.run_id,
            "command": self.command,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_seconds": self.duration_seconds,
            "total": self.total,
            "by_severity": self.by_severity,
            "entries": [entry.to_dict() for entry in self.entries],
        }


class ErrorCollector:
    """Collects diagnostics during a single netdiagram run."""

    def __init__(self, command: str):
        self.command = command
        self.start_time = datetime.now(UTC)
        self.run_id = self._generate_run_id()
        self.entries: list[DiagnosticEntry] = []

        logger.debug(f"Initialized error collector for run {self.run_id}")

    def collect_error(
        self,
        error: BaseException,
        context: ErrorContext,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> str:
        """Collect an exception with its context.

        Returns:
            Entry ID for reference
        """
        entry_id = str(uuid.uuid4())[:8]
        if error.__traceback__ is not None:
            traceback_lines = traceback.format_exception(type(error), error, error.__traceback__)
        else:
            traceback_lines = []

        entry = DiagnosticEntry(
            entry_id=entry_id,
            run_id=self.run_id,
            timestamp=datetime.now(UTC).isoformat(),
            severity=severity,
            error_type=type(error).__name__,
            message=str(error),
            context=asdict(context),
            traceback_lines=traceback_lines,
        )
        self.entries.append(entry)

        logger.debug(f"Collected {severity.value} {entry_id}: {entry.error_type} - {entry.message}")
        return entry_id

    def collect_warning(self, message: str, context: ErrorContext) -> str:
        """Collect a warning message."""
        return self.collect_error(RuntimeWarning(message), context, ErrorSeverity.WARNING)

    def has_errors(self) -> bool:
        """True when anything at ERROR severity or above was collected."""
        return any(
            entry.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL) for entry in self.entries
        )

    def get_error_counts(self) -> dict[str, int]:
        """Get entry counts by severity."""
        counts = {severity.value: 0 for severity in ErrorSeverity}
        for entry in self.entries:
            counts[entry.severity.value] += 1
        return counts

    def summary(self) -> DiagnosticSummary:
        end_time = datetime.now(UTC)
        return DiagnosticSummary(
            run_id=self.run_id,
            command=self.command,
            started_at=self.start_time.isoformat(),
            completed_at=end_time.isoformat(),
            duration_seconds=(end_time - self.start_time).total_seconds(),
            total=len(self.entries),
            by_severity=self.get_error_counts(),
            entries=list(self.entries),
        )

    def flush_to_filesystem(self, output_file: Path) -> Path:
        """Write the run summary as JSON to ``output_file``."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(self.summary().to_dict(), f, indent=2, ensure_ascii=False)

        logger.info(f"Wrote {len(self.entries)} diagnostics to: {output_file}")
        return output_file

    def _generate_run_id(self) -> str:
        # Format: run-YYYYMMDD-HHMMSS-{short_uuid}
        timestamp_part = self.start_time.strftime("run-%Y%m%d-%H%M%S")
        uuid_part = str(uuid.uuid4())[:8]
        return f"{timestamp_part}-{uuid_part}"


def create_error_collector(command: str) -> ErrorCollector:
    """Create error collector for a netdiagram run."""
    return ErrorCollector(command)
