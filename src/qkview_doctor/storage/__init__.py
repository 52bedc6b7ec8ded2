"""Storage package - SQLite ledger of processed uploads."""

from qkview_doctor.storage.db import open_ledger
from qkview_doctor.storage.models import UploadRecord
from qkview_doctor.storage.repositories import UploadRepository

__all__ = [
    "UploadRecord",
    "UploadRepository",
    "open_ledger",
]
