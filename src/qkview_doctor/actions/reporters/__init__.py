"""Reporters - Render an AnalysisResult for humans or machines."""

from qkview_doctor.actions.reporters.base import BaseReporter
from qkview_doctor.actions.reporters.json_reporter import JsonReporter
from qkview_doctor.actions.reporters.rich_reporter import RichReporter

__all__ = ["BaseReporter", "JsonReporter", "RichReporter"]
