"""Base Reporter Interface."""

from abc import ABC, abstractmethod

from rich.console import Console

from qkview_doctor.model.report import AnalysisResult


class BaseReporter(ABC):
    """Abstract base class for all analysis reporters."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    @abstractmethod
    def report(self, result: AnalysisResult) -> None:
        """Render one analysis result."""
        pass
