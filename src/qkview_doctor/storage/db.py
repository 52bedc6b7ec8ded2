"""SQLite file handling for the upload ledger.

open_ledger() creates the ledger file and the uploads table on first use.
Rows come back as sqlite3.Row so repositories read columns by name.
"""

import sqlite3
from pathlib import Path

from qkview_doctor.errors import StorageError
from qkview_doctor.storage.models import ALL_SCHEMAS


def open_ledger(path: Path | str) -> sqlite3.Connection:
    """Open (creating if needed) the ledger at `path`.

    Raises:
        StorageError: The file cannot be created or the schema applied.
    """
    path = Path(path)
    conn = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        for ddl in ALL_SCHEMAS:
            conn.execute(ddl)
        conn.commit()
    except (OSError, sqlite3.Error) as e:
        if conn is not None:
            conn.close()
        raise StorageError(f"cannot open upload ledger {path}: {e}") from e
    return conn
