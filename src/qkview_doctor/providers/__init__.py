"""Providers package - Pluggable event, storage and index backends.

Only the local, in-process implementations live here. Networked adapters
(Kafka, MinIO, Elasticsearch) implement the same base classes.
"""

from qkview_doctor.providers.base import Event, EventHandler, EventSource, LogIndexer, StorageBackend
from qkview_doctor.providers.local import LocalEventSource, LocalStorage, MemoryIndexer

__all__ = [
    "Event",
    "EventHandler",
    "EventSource",
    "LocalEventSource",
    "LocalStorage",
    "LogIndexer",
    "MemoryIndexer",
    "StorageBackend",
]
