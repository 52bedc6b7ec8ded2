"""JSON Reporter Implementation."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console

from qkview_doctor.actions.reporters.base import BaseReporter
from qkview_doctor.errors import QkviewDoctorError
from qkview_doctor.model.report import AnalysisResult

logger = logging.getLogger(__name__)


class JsonReporter(BaseReporter):
    """Writes the metadata.json document to stdout or a file."""

    def __init__(
        self,
        path: str | Path | None = None,
        stdout: bool = False,
        console: Console | None = None,
    ) -> None:
        super().__init__(console)
        self.path = Path(path) if path else None
        self.stdout = stdout

    def render(self, result: AnalysisResult) -> str:
        return json.dumps(result.to_dict(), indent=2)

    def report(self, result: AnalysisResult) -> None:
        data = self.render(result)

        if self.stdout or self.path is None:
            # Raw text, no console markup or wrapping.
            click.echo(data)
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(data + "\n", encoding="utf-8")
        except OSError as e:
            raise QkviewDoctorError(f"failed to write {self.path}: {e}") from e
        logger.info("Wrote analysis results to %s", self.path)
