"""Local providers used when analysing a single archive on disk."""

import shutil
import threading
from pathlib import Path

from qkview_doctor.errors import StorageError
from qkview_doctor.model.log_record import LogRecord
from qkview_doctor.providers.base import Event, EventHandler, EventSource, LogIndexer, StorageBackend


class LocalEventSource(EventSource):
    """Fires exactly one event for a local file."""

    def __init__(self, file_path: str | Path, metadata: dict[str, str] | None = None) -> None:
        self.file_path = str(file_path)
        self.extra_metadata = dict(metadata or {})
        self._fired = False

    def subscribe(self, handler: EventHandler) -> None:
        if self._fired:
            return
        self._fired = True
        handler(
            Event(
                bucket="local",
                key=self.file_path,
                metadata={
                    "filename": Path(self.file_path).name,
                    "mode": "local",
                    **self.extra_metadata,
                },
            )
        )


class LocalStorage(StorageBackend):
    """Serves a single local file regardless of bucket/key."""

    def __init__(self, file_path: str | Path) -> None:
        self.base_path = Path(file_path)

    def download_to_file(self, bucket: str, key: str, dest_path: str) -> None:
        dest = Path(dest_path)
        if dest.resolve() == self.base_path.resolve():
            return
        try:
            shutil.copyfile(self.base_path, dest)
        except OSError as e:
            raise StorageError(f"local: failed to copy {self.base_path} to {dest}: {e}") from e


class MemoryIndexer(LogIndexer):
    """Keeps every indexed record in memory (thread-safe)."""

    def __init__(self) -> None:
        self._entries: list[LogRecord] = []
        self._lock = threading.Lock()

    def index(self, record: LogRecord) -> None:
        with self._lock:
            self._entries.append(record)

    def index_batch(self, records: list[LogRecord]) -> None:
        with self._lock:
            self._entries.extend(records)

    def get_entries(self) -> list[LogRecord]:
        """Return a copy of everything indexed so far, in indexing order."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
