"""Timeline Builder - Daily count of error-class events."""

from collections import Counter

from qkview_doctor.model.log_record import TIMELINE_LEVELS, LogRecord
from qkview_doctor.model.report import TimelineEntry

# Date of an unset timestamp.
ZERO_DATE = "0001-01-01"


class TimelineBuilder:
    """Buckets WARNING/ERROR/CRITICAL/SEVERE records by calendar day."""

    def build(self, records: list[LogRecord]) -> list[TimelineEntry]:
        counts: Counter[str] = Counter()
        for record in records:
            if record.severity not in TIMELINE_LEVELS:
                continue
            day = record.timestamp.date().isoformat()
            if day != ZERO_DATE:
                counts[day] += 1

        return [TimelineEntry(date=day, errors=count) for day, count in sorted(counts.items())]
