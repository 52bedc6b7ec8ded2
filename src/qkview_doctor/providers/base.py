"""Base capability interfaces for the ingestion pipeline."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable

from qkview_doctor.model.log_record import LogRecord


@dataclass
class Event:
    """Notification that an archive is ready to be processed."""

    bucket: str
    key: str
    metadata: dict[str, str] = field(default_factory=dict)


EventHandler = Callable[[Event], None]


class EventSource(ABC):
    """Delivers archive events to a handler."""

    @abstractmethod
    def subscribe(self, handler: EventHandler) -> None:
        """Call handler for every event until the source is exhausted."""
        ...

    def close(self) -> None:
        """Release any held resources."""


class StorageBackend(ABC):
    """Fetches archives referenced by events."""

    @abstractmethod
    def download_to_file(self, bucket: str, key: str, dest_path: str) -> None:
        """Store the object bucket/key at dest_path."""
        ...

    def close(self) -> None:
        """Release any held resources."""


class LogIndexer(ABC):
    """Collects classified log records."""

    @abstractmethod
    def index(self, record: LogRecord) -> None:
        ...

    def index_batch(self, records: list[LogRecord]) -> None:
        for record in records:
            self.index(record)

    def close(self) -> None:
        """Flush and release any held resources."""
