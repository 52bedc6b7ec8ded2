"""Log line classification.

A raw log line becomes a LogRecord only when it carries both a severity
word and a recognizable date. Everything else is dropped silently; qkview
logs are too heterogeneous to expect a single format.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from qkview_doctor.model.log_record import LogRecord

MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

_MONTH_ALT = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"


@dataclass(frozen=True)
class DateParseOptions:
    """How to infer the year for syslog-style dates without one.

    Attributes:
        reference_time: "Now" for year inference and future-date rollback.
        default_year: Explicit year; wins over reference_time.
    """

    reference_time: datetime | None = None
    default_year: int | None = None


def _with_year(value: datetime, year: int) -> datetime:
    """Move a timestamp to another year; Feb 29 rolls over to Mar 1."""
    try:
        return value.replace(year=year)
    except ValueError:
        return value.replace(year=year, month=3, day=1)


class LogClassifier:
    """Extracts severity and timestamp from raw log lines."""

    # Example: error, Warning, CRITICAL (whole word, any case)
    STATUS_RE = re.compile(r"\b(warning|error|severe|critical|notice)\b", re.IGNORECASE)

    # Example: Oct 14 13:00:00 2020
    DATE_WITH_YEAR_RE = re.compile(
        rf"\b({_MONTH_ALT})\s+(\d{{1,2}})\s+(\d{{2}}):(\d{{2}}):(\d{{2}})\s+(\d{{4}})\b"
    )
    # Example: 2023-10-24 13:00:00
    ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2}):(\d{2})\b")
    # Example: 2023-10-24T13:00:00Z, 2023-10-24T13:00:00+02:00
    RFC3339_RE = re.compile(
        r"\b(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:Z|[+-]\d{2}:?\d{2})?\b"
    )
    # Example: Oct 14 13:00:00 (syslog, no year)
    DATE_WITHOUT_YEAR_RE = re.compile(
        rf"\b({_MONTH_ALT})\s+(\d{{1,2}})\s+(\d{{2}}):(\d{{2}}):(\d{{2}})\b"
    )

    def __init__(self, options: DateParseOptions | None = None) -> None:
        self.options = options or DateParseOptions()

    def parse_status(self, line: str) -> str | None:
        """Return the first severity word upper-cased, or None."""
        match = self.STATUS_RE.search(line)
        if match:
            return match.group(1).upper()
        return None

    def parse_date(self, line: str) -> datetime | None:
        """Return the first recognizable date in the line, or None.

        Patterns are tried in a fixed order; a pattern whose match is not a
        real calendar date falls through to the next one.
        """
        match = self.DATE_WITH_YEAR_RE.search(line)
        if match:
            mon, day, hh, mm, ss, year = match.groups()
            parsed = self._build(int(year), MONTHS[mon], day, hh, mm, ss)
            if parsed is not None:
                return parsed

        for pattern in (self.ISO_DATE_RE, self.RFC3339_RE):
            match = pattern.search(line)
            if match:
                year, month, day, hh, mm, ss = match.groups()
                parsed = self._build(int(year), int(month), day, hh, mm, ss)
                if parsed is not None:
                    return parsed

        match = self.DATE_WITHOUT_YEAR_RE.search(line)
        if match:
            mon, day, hh, mm, ss = match.groups()
            # 2000 is a leap year, so Feb 29 survives until the real year is applied.
            parsed = self._build(2000, MONTHS[mon], day, hh, mm, ss)
            if parsed is not None:
                parsed = _with_year(parsed, self._infer_year())
                now = self.options.reference_time or datetime.now()
                if parsed > now:
                    parsed = _with_year(parsed, parsed.year - 1)
                return parsed

        return None

    def classify(self, line: str) -> tuple[str, datetime] | None:
        """Return (severity, timestamp) or None when the line is rejected."""
        status = self.parse_status(line)
        if status is None:
            return None
        timestamp = self.parse_date(line)
        if timestamp is None:
            return None
        return status, timestamp

    def to_record(self, line: str, path: str = "", source: str = "") -> LogRecord | None:
        """Classify a line and wrap it into a LogRecord."""
        classified = self.classify(line)
        if classified is None:
            return None
        severity, timestamp = classified
        return LogRecord(path=path, line=line, severity=severity, timestamp=timestamp, source=source)

    def _infer_year(self) -> int:
        if self.options.default_year:
            return self.options.default_year
        if self.options.reference_time is not None:
            return self.options.reference_time.year
        return datetime.now().year

    @staticmethod
    def _build(year: int, month: int, day: str, hh: str, mm: str, ss: str) -> datetime | None:
        try:
            return datetime(year, month, int(day), int(hh), int(mm), int(ss))
        except ValueError:
            return None
