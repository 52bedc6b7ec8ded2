"""Analyzer package - Derives report facets from classified log records."""

from qkview_doctor.analyzer.error_analyzer import ErrorAnalyzer
from qkview_doctor.analyzer.ssl_analyzer import SSLAnalyzer
from qkview_doctor.analyzer.summary import build_summary
from qkview_doctor.analyzer.timeline import TimelineBuilder
from qkview_doctor.analyzer.virtual_servers import VirtualServerAnalyzer

__all__ = [
    "ErrorAnalyzer",
    "SSLAnalyzer",
    "TimelineBuilder",
    "VirtualServerAnalyzer",
    "build_summary",
]
