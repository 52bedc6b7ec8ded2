"""Event-driven archive processing.

QkviewProcessor wires an event source, a storage backend and a log indexer
together: every event names an archive that is downloaded, unpacked and
classified into LogRecords. Collaborators are injected, so local and
networked implementations are interchangeable.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable

from qkview_doctor.errors import ArchiveError, ConfigurationError, QkviewDoctorError
from qkview_doctor.model.device import DeviceConfig
from qkview_doctor.parser.qkview import ProcessResult, QkviewParser, extract_dir_for
from qkview_doctor.providers.base import Event, EventSource, LogIndexer, StorageBackend
from qkview_doctor.storage.repositories import UploadRepository

logger = logging.getLogger(__name__)

UUID_METADATA_KEYS = ("X-Amz-Meta-Uuid", "x-amz-meta-uuid")


def _event_uuid(event: Event) -> str:
    for key in UUID_METADATA_KEYS:
        value = event.metadata.get(key)
        if value:
            return value
    return ""


class QkviewProcessor:
    """Consumes archive events and feeds classified records to an indexer."""

    def __init__(
        self,
        storage: StorageBackend | None,
        events: EventSource | None,
        indexer: LogIndexer | None,
        parser: QkviewParser | None = None,
        ledger: UploadRepository | None = None,
        *,
        work_dir: str | Path | None = None,
        upload_kind: str = "logs",
        log_fn: Callable[[str], None] | None = None,
    ) -> None:
        if storage is None:
            raise ConfigurationError("processor: storage backend is required")
        if events is None:
            raise ConfigurationError("processor: event source is required")
        if indexer is None:
            raise ConfigurationError("processor: log indexer is required")

        self.storage = storage
        self.events = events
        self.indexer = indexer
        self.parser = parser or QkviewParser()
        self.ledger = ledger
        self.work_dir = Path(work_dir) if work_dir else Path(tempfile.gettempdir())
        self.upload_kind = upload_kind
        self._log_fn = log_fn
        self._device_config: DeviceConfig | None = None
        self.results: list[ProcessResult] = []

    @property
    def device_config(self) -> DeviceConfig | None:
        """Configuration from the most recent archive that carried one."""
        return self._device_config

    def _log(self, msg: str) -> None:
        logger.info(msg)
        if self._log_fn:
            self._log_fn(msg)

    def run(self) -> None:
        """Consume events until the source is exhausted."""
        self._log("Processor: starting event consumption...")
        self.events.subscribe(self.handle_event)

    def handle_event(self, event: Event) -> None:
        """Download, unpack and index one archive.

        Raises:
            StorageError: The archive could not be downloaded.
            ArchiveError: The archive could not be processed.
        """
        self._log(f"Processor: handling event for {event.bucket}/{event.key}")

        uuid = _event_uuid(event)
        if self.ledger is not None:
            upload = self.ledger.find_unprocessed(uuid, self.upload_kind) if uuid else None
            if upload is None:
                logger.info(
                    "Processor: skipping %s (not found in tracking DB or already processed)", event.key
                )
                return
            event.bucket = upload.bucket

        filename = event.key.split("/")[-1]
        local_path = self.work_dir / filename
        self.work_dir.mkdir(parents=True, exist_ok=True)

        self.storage.download_to_file(event.bucket, event.key, str(local_path))
        logger.info("Processor: downloaded %s to %s", event.key, local_path)

        try:
            result = self.parser.process_file(local_path, self.indexer)
        except ArchiveError as e:
            self._cleanup(local_path, source_key=event.key)
            raise ArchiveError(f"processing failed for {filename}: {e}") from e

        self.results.append(result)
        if result.device_config is not None:
            self._device_config = result.device_config

        self._log(
            f"Processor: processed {filename} - found {result.entries_found} entries, "
            f"indexed {result.entries_indexed}, errors: {len(result.errors)}"
        )
        for err in result.errors:
            logger.warning("Processor: non-fatal error: %s", err)

        if self.ledger is not None and not self.ledger.mark_processed(uuid):
            logger.warning("Processor: failed to mark %s as processed", uuid)

        self._cleanup(local_path, source_key=event.key)

    def _cleanup(self, local_path: Path, source_key: str) -> None:
        """Remove the downloaded copy (never the source itself) and its extraction."""
        try:
            is_source = local_path.resolve() == Path(source_key).resolve()
        except OSError:
            is_source = False
        if not is_source:
            try:
                local_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Processor: failed to remove %s: %s", local_path, e)

        extract_dir = extract_dir_for(local_path)
        if extract_dir != local_path:
            shutil.rmtree(extract_dir, ignore_errors=True)

    def close(self) -> None:
        """Close every collaborator, reporting all failures together."""
        errors: list[str] = []
        closers = [
            ("events", self.events.close),
            ("storage", self.storage.close),
            ("indexer", self.indexer.close),
        ]
        if self.ledger is not None:
            closers.append(("ledger", self.ledger.close))
        for label, closer in closers:
            try:
                closer()
            except Exception as e:
                errors.append(f"{label} close: {e}")
        if errors:
            raise QkviewDoctorError("close errors: " + "; ".join(errors))
