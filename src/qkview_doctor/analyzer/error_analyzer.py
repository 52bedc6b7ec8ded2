"""Error Analyzer - Groups recurring error lines into top errors."""

import re
from dataclasses import dataclass
from datetime import datetime

from qkview_doctor.analyzer.text import truncate
from qkview_doctor.model.log_record import ERROR_LEVELS, LogRecord
from qkview_doctor.model.report import TopError

MAX_TOP_ERRORS = 10
MESSAGE_MAX_LEN = 150

# Searched in order, case-insensitively; the text after the first hit is the message.
MESSAGE_MARKERS = (": error:", ": warning:", ": critical:", "error:", "err:")


@dataclass
class _ErrorGroup:
    representative: str
    count: int
    last_occurred: datetime


class ErrorAnalyzer:
    """Counts ERROR/CRITICAL/SEVERE lines by their normalized text.

    The grouping key masks IPv4 addresses and ports only. Clock times and
    dates embedded in the line stay in the key, so the same condition logged
    at different times forms separate groups.
    """

    def __init__(self) -> None:
        self.ip_re = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}", re.ASCII)
        # Clock times are matched first so their :MM/:SS parts are never taken for ports.
        self.port_re = re.compile(r"(?<!\d)(\d{1,2}:\d{2}:\d{2})(?!\d)|:\d{2,5}\b", re.ASCII)

    def analyze(self, records: list[LogRecord]) -> list[TopError]:
        groups: dict[str, _ErrorGroup] = {}

        for record in records:
            if record.severity not in ERROR_LEVELS:
                continue

            key = self.normalize_message(record.line)
            group = groups.get(key)
            if group is None:
                groups[key] = _ErrorGroup(
                    representative=record.line,
                    count=1,
                    last_occurred=record.timestamp,
                )
                continue

            group.count += 1
            if record.timestamp > group.last_occurred:
                group.last_occurred = record.timestamp
                group.representative = record.line

        result = [
            TopError(
                message=self.extract_error_message(g.representative),
                count=g.count,
                last_occurred=g.last_occurred,
            )
            for g in groups.values()
        ]
        result.sort(key=lambda e: e.count, reverse=True)
        return result[:MAX_TOP_ERRORS]

    def normalize_message(self, line: str) -> str:
        """Grouping key: IPs and ports masked, whitespace collapsed, lower-cased."""
        normalized = self.ip_re.sub("X.X.X.X", line)
        normalized = self.port_re.sub(lambda m: m.group(1) or ":XXXX", normalized)
        return " ".join(normalized.split()).lower()

    def extract_error_message(self, line: str) -> str:
        """Human-readable message from a representative line."""
        lower = line.lower()
        for marker in MESSAGE_MARKERS:
            idx = lower.find(marker)
            if idx != -1:
                message = line[idx + len(marker):].strip()
                return truncate(message, MESSAGE_MAX_LEN)
        return truncate(line, MESSAGE_MAX_LEN)

