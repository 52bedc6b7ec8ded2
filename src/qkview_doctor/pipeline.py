"""Shared analysis pipeline.

Public API:
    Analyzer().analyze(records, device_config) -> AnalysisResult
    run_local_analysis(file_path, settings) -> AnalysisResult
"""

import logging
import tempfile
import uuid
from pathlib import Path
from typing import Callable

from qkview_doctor.analyzer.error_analyzer import ErrorAnalyzer
from qkview_doctor.analyzer.ssl_analyzer import SSLAnalyzer
from qkview_doctor.analyzer.summary import build_summary
from qkview_doctor.analyzer.timeline import TimelineBuilder
from qkview_doctor.analyzer.virtual_servers import VirtualServerAnalyzer
from qkview_doctor.config import Settings
from qkview_doctor.engine.recommendations import RecommendationEngine
from qkview_doctor.model.device import DeviceConfig
from qkview_doctor.model.log_record import LogRecord
from qkview_doctor.model.report import AnalysisResult, EntryLog, format_iso
from qkview_doctor.parser.qkview import QkviewParser
from qkview_doctor.processor import QkviewProcessor
from qkview_doctor.providers.local import LocalEventSource, LocalStorage, MemoryIndexer
from qkview_doctor.storage.repositories import UploadRepository

logger = logging.getLogger(__name__)


class Analyzer:
    """Runs every analysis component over one archive's records."""

    def __init__(self) -> None:
        self.timeline = TimelineBuilder()
        self.ssl = SSLAnalyzer()
        self.errors = ErrorAnalyzer()
        self.virtual_servers = VirtualServerAnalyzer()
        self.recommendations = RecommendationEngine()

    def analyze(
        self,
        records: list[LogRecord],
        device_config: DeviceConfig | None = None,
    ) -> AnalysisResult:
        """Build the full report.

        Later steps consume earlier results, so the order is fixed:
        timeline, SSL, errors, virtual servers, summary, entry logs,
        recommendations.
        """
        error_timeline = self.timeline.build(records)
        ssl_findings = self.ssl.analyze(records)
        top_errors = self.errors.analyze(records)
        virtual_servers = self.virtual_servers.analyze(device_config, records)
        summary = build_summary(virtual_servers, ssl_findings)
        entry_logs = [
            EntryLog(message=r.line, level=r.severity, date=format_iso(r.timestamp))
            for r in records
        ]
        recommendations = self.recommendations.generate(summary, ssl_findings, top_errors)

        logger.debug(
            "Analysis complete: %d timeline days, %d SSL findings, %d top errors, %d virtual servers",
            len(error_timeline),
            len(ssl_findings),
            len(top_errors),
            len(virtual_servers),
        )

        return AnalysisResult(
            summary=summary,
            error_timeline=error_timeline,
            ssl_findings=ssl_findings,
            top_errors=top_errors,
            recommendations=recommendations,
            virtual_servers=virtual_servers,
            entry_logs=entry_logs,
        )


def run_local_analysis(
    file_path: str | Path,
    settings: Settings | None = None,
    *,
    log_fn: Callable[[str], None] | None = None,
) -> AnalysisResult:
    """Process a qkview on disk and analyse it.

    Args:
        file_path: Path to the qkview archive.
        settings: Runtime settings (defaults apply when omitted).
        log_fn: Optional callback for progress logging.

    Raises:
        StorageError: The archive could not be copied into the work dir.
        ArchiveError: The archive could not be unpacked or has no logs.
    """
    def _log(msg: str) -> None:
        if log_fn:
            log_fn(msg)

    settings = settings or Settings()
    file_path = Path(file_path)

    ledger: UploadRepository | None = None
    metadata: dict[str, str] = {}
    if settings.ledger_path:
        ledger = UploadRepository(settings.ledger_path)
        upload_uuid = str(uuid.uuid4())
        size = file_path.stat().st_size if file_path.exists() else 0
        ledger.create(file_path.name, "local", upload_uuid, size=size, kind=settings.upload_kind)
        metadata["X-Amz-Meta-Uuid"] = upload_uuid

    indexer = MemoryIndexer()
    with tempfile.TemporaryDirectory(prefix="qkview-doctor-") as tmp_dir:
        processor = QkviewProcessor(
            LocalStorage(file_path),
            LocalEventSource(file_path, metadata=metadata),
            indexer,
            QkviewParser(settings.date_options()),
            ledger,
            work_dir=settings.work_dir or tmp_dir,
            upload_kind=settings.upload_kind,
            log_fn=log_fn,
        )
        try:
            processor.run()
        finally:
            processor.close()

    records = indexer.get_entries()
    _log(f"Analyzing {len(records)} log entries...")
    return Analyzer().analyze(records, processor.device_config)
