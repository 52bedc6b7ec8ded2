"""Parser package - Converts raw qkview content into structured models.

Parsers never analyse; they only structure configuration text and log lines
for the analyzers.
"""

from qkview_doctor.parser.bigip_conf import BigIPConfigParser, clean_name
from qkview_doctor.parser.log_classifier import DateParseOptions, LogClassifier
from qkview_doctor.parser.qkview import ProcessResult, QkviewParser

__all__ = [
    "BigIPConfigParser",
    "DateParseOptions",
    "LogClassifier",
    "ProcessResult",
    "QkviewParser",
    "clean_name",
]
