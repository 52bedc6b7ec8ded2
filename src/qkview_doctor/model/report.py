"""Report dataclasses - Values produced by one analysis run.

Field names in `to_dict()` output follow the metadata.json document
consumed by downstream dashboards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def format_iso(value: datetime | None) -> str:
    """Format a timestamp as ISO-8601 with a literal Z, or "" when unset."""
    if value is None or value == datetime.min:
        return ""
    return value.strftime(ISO_FORMAT)


@dataclass(frozen=True)
class SSLFinding:
    """A detected SSL/TLS posture issue."""

    severity: str  # critical, warning
    type: str  # certificate, cipher, configuration
    message: str
    detail: str = ""
    affected_vs: tuple[str, ...] = ()

    @property
    def dedup_key(self) -> str:
        return self.type + self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "type": self.type,
            "message": self.message,
            "detail": self.detail,
            "affectedVS": list(self.affected_vs),
        }


@dataclass(frozen=True)
class TopError:
    """A group of recurring error lines."""

    message: str
    count: int
    last_occurred: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "count": self.count,
            "lastOccurred": format_iso(self.last_occurred),
        }


@dataclass(frozen=True)
class TimelineEntry:
    """Number of error-class events on one calendar day."""

    date: str  # YYYY-MM-DD
    errors: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "errors": self.errors}


@dataclass(frozen=True)
class VirtualServerInfo:
    """Derived health of one virtual server."""

    name: str
    pool: str
    status: str  # healthy, warning, critical
    active_members: str  # "active/total"
    last_error: str | None = None  # "<message> - YYYY-MM-DD HH:MM:SS"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "pool": self.pool,
            "status": self.status,
            "activeMembers": self.active_members,
            "lastError": self.last_error,
        }


@dataclass(frozen=True)
class Recommendation:
    """An actionable recommendation."""

    priority: str  # critical, high, medium, low
    title: str
    description: str
    impact: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
        }


@dataclass(frozen=True)
class Summary:
    """Counts of virtual server states and expiring certificates."""

    critical: int = 0
    warning: int = 0
    healthy: int = 0
    certs_expiring_soon: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "critical": self.critical,
            "warning": self.warning,
            "healthy": self.healthy,
            "certsExpiringSoon": self.certs_expiring_soon,
        }


@dataclass(frozen=True)
class EntryLog:
    """Pass-through view of one classified log line."""

    message: str
    level: str
    date: str  # ISO-8601

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "level": self.level, "date": self.date}


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analysis run produces."""

    summary: Summary = field(default_factory=Summary)
    error_timeline: list[TimelineEntry] = field(default_factory=list)
    ssl_findings: list[SSLFinding] = field(default_factory=list)
    top_errors: list[TopError] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    virtual_servers: list[VirtualServerInfo] = field(default_factory=list)
    entry_logs: list[EntryLog] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "errorTimeline": [e.to_dict() for e in self.error_timeline],
            "sslFindings": [f.to_dict() for f in self.ssl_findings],
            "topErrors": [e.to_dict() for e in self.top_errors],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "virtualServers": [v.to_dict() for v in self.virtual_servers],
            "entryLogs": [e.to_dict() for e in self.entry_logs],
        }
