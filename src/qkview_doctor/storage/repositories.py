"""Repository for the upload ledger.

All writes commit explicitly. Reads return typed dataclass records.
"""

import sqlite3
import threading
from pathlib import Path
from typing import Any

from qkview_doctor.storage.db import open_ledger
from qkview_doctor.storage.models import UploadRecord


class UploadRepository:
    """Tracks which uploaded archives have been processed.

    Bound to one ledger file. Each thread opens its own connection on first
    use; close() releases the calling thread's connection.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._local = threading.local()

    def _db(self) -> sqlite3.Connection:
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = open_ledger(self.db_path)
            self._local.connection = conn
        return conn

    def close(self) -> None:
        conn = getattr(self._local, "connection", None)
        if conn is not None:
            conn.close()
            self._local.connection = None

    def create(
        self,
        filename: str,
        bucket: str,
        uuid: str,
        size: int = 0,
        kind: str = "logs",
    ) -> int:
        """Register an upload. Returns the new row ID."""
        db = self._db()
        cursor = db.execute(
            """INSERT INTO uploads (filename, bucket, size, uuidtag, type)
               VALUES (?, ?, ?, ?, ?)""",
            (filename, bucket, size, uuid, kind),
        )
        db.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def find_unprocessed(self, uuid: str, kind: str = "logs") -> UploadRecord | None:
        """Return the pending upload with this uuid and type, or None."""
        row = self._db().execute(
            """SELECT * FROM uploads
               WHERE uuidtag = ? AND type = ? AND processed = 0
               ORDER BY id LIMIT 1""",
            (uuid, kind),
        ).fetchone()
        return self._row_to_record(row) if row else None

    def mark_processed(self, uuid: str) -> bool:
        """Flag every upload with this uuid as processed. True if any row changed."""
        db = self._db()
        cursor = db.execute(
            "UPDATE uploads SET processed = 1 WHERE uuidtag = ?",
            (uuid,),
        )
        db.commit()
        return cursor.rowcount > 0

    def get_by_id(self, upload_id: int) -> UploadRecord | None:
        row = self._db().execute("SELECT * FROM uploads WHERE id = ?", (upload_id,)).fetchone()
        return self._row_to_record(row) if row else None

    @staticmethod
    def _row_to_record(row: Any) -> UploadRecord:
        return UploadRecord(
            id=row["id"],
            filename=row["filename"],
            bucket=row["bucket"],
            uuid=row["uuidtag"],
            size=row["size"],
            processed=bool(row["processed"]),
            upload_time=row["uploadtime"] or "",
            kind=row["type"],
        )
