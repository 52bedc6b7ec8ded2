"""Model package - Core data structures for qkview-doctor."""

from qkview_doctor.model.device import DeviceConfig, Pool, PoolMember, VirtualServer
from qkview_doctor.model.log_record import LogRecord
from qkview_doctor.model.report import (
    AnalysisResult,
    EntryLog,
    Recommendation,
    SSLFinding,
    Summary,
    TimelineEntry,
    TopError,
    VirtualServerInfo,
)

__all__ = [
    "AnalysisResult",
    "DeviceConfig",
    "EntryLog",
    "LogRecord",
    "Pool",
    "PoolMember",
    "Recommendation",
    "SSLFinding",
    "Summary",
    "TimelineEntry",
    "TopError",
    "VirtualServer",
    "VirtualServerInfo",
]
