"""Pytest configuration and fixtures for qkview-doctor tests."""

import io
import tarfile
from datetime import datetime
from pathlib import Path

import pytest

from qkview_doctor.model.log_record import LogRecord
from qkview_doctor.storage.repositories import UploadRepository


SAMPLE_BIGIP_CONF = """\
#TMSH-VERSION: 15.1.0

ltm virtual /Common/vs_web {
    destination /Common/10.1.1.10:443
    ip-protocol tcp
    pool /Common/pool_web
    profiles {
        /Common/http { }
        /Common/clientssl {
            context clientside
        }
    }
}
ltm virtual /Common/vs_api {
    destination /Common/10.1.1.11:443
    pool /Common/pool_api
}
ltm virtual /Common/vs_legacy {
    destination /Common/10.1.1.12:80
    disabled
    pool /Common/pool_web
}
ltm virtual /Common/vs_orphan {
    destination /Common/10.1.1.13:80
    pool /Common/pool_missing
}
ltm pool /Common/pool_web {
    members {
        /Common/10.0.0.10:80 {
            address 10.0.0.10
        }
        /Common/10.0.0.11:80 {
            address 10.0.0.11
            session user-disabled
        }
        /Common/10.0.0.12:80 {
            address 10.0.0.12
        }
    }
    monitor /Common/http
}
ltm pool /Common/pool_api {
    monitor /Common/tcp
}
"""

SAMPLE_LTM_LOG = """\
Oct 14 13:00:00 2024 bigip1 err tmm[1234]: 01260009:4: Connection error: ssl_hs_rxhello:7145: alert(40) handshake failure
Oct 14 13:05:00 2024 bigip1 warning tmm[1234]: Pool /Common/pool_web member /Common/10.0.0.11:80 monitor status down.
2024-10-15 08:00:00 bigip1 error mcpd[99]: vs_api: error: connection refused 10.0.0.20:8080
2024-10-15 09:00:00 bigip1 notice mcpd[99]: configuration saved
this line has no severity and no date
Oct 16 10:00:00 2024 bigip1 critical tmm[1]: Certificate expired for vs_web
"""


@pytest.fixture
def sample_bigip_conf():
    """bigip.conf with healthy, degraded, disabled and orphaned virtual servers."""
    return SAMPLE_BIGIP_CONF


@pytest.fixture
def make_record():
    """Factory for LogRecords with sensible defaults."""
    def _make(
        line: str,
        severity: str = "ERROR",
        timestamp: datetime | None = None,
        path: str = "/var/log/ltm",
        source: str = "qkview.tar.gz",
    ) -> LogRecord:
        return LogRecord(
            path=path,
            line=line,
            severity=severity,
            timestamp=timestamp or datetime(2024, 10, 1, 12, 0, 0),
            source=source,
        )
    return _make


def build_qkview(
    dest: Path,
    files: dict[str, str | bytes],
    name: str = "support.qkview.tar.gz",
) -> Path:
    """Write a gzipped tar holding `files` (archive path -> content)."""
    archive = dest / name
    with tarfile.open(archive, "w:gz") as tar:
        for arcname, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(arcname)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return archive


@pytest.fixture
def qkview_archive(tmp_path):
    """A small qkview with a bigip.conf and an ltm log."""
    src = tmp_path / "src"
    src.mkdir()
    return build_qkview(
        src,
        {
            "config/bigip.conf": SAMPLE_BIGIP_CONF,
            "var/log/ltm": SAMPLE_LTM_LOG,
            "var/log/audit": "Oct 14 13:00:00 2024 error audit line\n",
            "var/log/empty.log": "",
            "var/log/journal/system.journal": "Oct 14 13:00:00 2024 error journal line\n",
            "var/log/wtmp": b"\x00\x01\x02binary error Oct 14 13:00:00 2024",
        },
    )


@pytest.fixture
def ledger_db(tmp_path):
    """Upload ledger bound to a per-test database file."""
    repo = UploadRepository(tmp_path / "ledger.db")
    yield repo
    repo.close()
