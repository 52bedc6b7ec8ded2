"""LogRecord dataclass - A classified, timestamped log line."""

from dataclasses import dataclass
from datetime import datetime

# Normalized severity tokens, upper-cased from the matched log text.
WARNING = "WARNING"
ERROR = "ERROR"
SEVERE = "SEVERE"
CRITICAL = "CRITICAL"
NOTICE = "NOTICE"

SEVERITIES = (WARNING, ERROR, SEVERE, CRITICAL, NOTICE)

# Severities that count as errors for grouping and last-error lookup.
ERROR_LEVELS = frozenset({ERROR, CRITICAL, SEVERE})

# Severities that count towards the daily error timeline.
TIMELINE_LEVELS = frozenset({ERROR, CRITICAL, SEVERE, WARNING})


@dataclass(frozen=True)
class LogRecord:
    """A log line that carried both a severity token and a date.

    Lines missing either never become a LogRecord.

    Attributes:
        path: File inside the extracted archive the line came from.
        line: The raw line text.
        severity: One of SEVERITIES.
        timestamp: Parsed point in time (naive, as written in the log).
        source: Identifier of the originating archive.
    """

    path: str
    line: str
    severity: str
    timestamp: datetime
    source: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity in ERROR_LEVELS
