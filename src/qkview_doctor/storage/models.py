"""Schema DDL and record dataclasses for the upload ledger."""

from dataclasses import dataclass
from typing import Any

SCHEMA_UPLOADS = """
CREATE TABLE IF NOT EXISTS uploads (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT NOT NULL,
    bucket TEXT NOT NULL,
    size INTEGER NOT NULL DEFAULT 0,
    processed INTEGER NOT NULL DEFAULT 0,
    uploadtime TEXT NOT NULL DEFAULT (datetime('now')),
    uuidtag TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'logs'
);
"""

SCHEMA_UPLOADS_UUID_INDEX = """
CREATE INDEX IF NOT EXISTS idx_uploads_uuidtag ON uploads (uuidtag);
"""

ALL_SCHEMAS = [SCHEMA_UPLOADS, SCHEMA_UPLOADS_UUID_INDEX]


@dataclass
class UploadRecord:
    """An uploaded archive tracked for at-most-once processing."""

    id: int
    filename: str
    bucket: str
    uuid: str
    size: int = 0
    processed: bool = False
    upload_time: str = ""
    kind: str = "logs"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "bucket": self.bucket,
            "uuid": self.uuid,
            "size": self.size,
            "processed": self.processed,
            "upload_time": self.upload_time,
            "kind": self.kind,
        }
