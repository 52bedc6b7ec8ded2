"""Tests for qkview archive reading."""

import io
import tarfile
from pathlib import Path

import pytest

from conftest import SAMPLE_LTM_LOG, build_qkview
from qkview_doctor.errors import ArchiveError
from qkview_doctor.parser.qkview import QkviewParser, extract_dir_for
from qkview_doctor.providers.local import MemoryIndexer


@pytest.mark.parametrize(
    "name, expected",
    [
        ("support.qkview.tar.gz", "support.qkview"),
        ("support.tgz", "support"),
        ("support.tar", "support"),
        ("support.qkview", "support"),
        ("support.2024.qkview", "support.2024"),
    ],
)
def test_extract_dir_for(tmp_path, name, expected):
    assert extract_dir_for(tmp_path / name) == tmp_path / expected


class TestQkviewParser:
    """Archive extraction, file filtering and indexing."""

    def test_process_file(self, qkview_archive):
        indexer = MemoryIndexer()

        result = QkviewParser().process_file(qkview_archive, indexer)

        assert result.entries_found == 5
        assert result.entries_indexed == 5
        assert result.errors == []
        assert result.device_config is not None
        assert len(result.device_config.virtual_servers) == 4
        entries = indexer.get_entries()
        assert all(Path(e.path).name == "ltm" for e in entries)
        assert all(e.source == str(qkview_archive) for e in entries)

    def test_process_plain_qkview_name(self, tmp_path):
        archive = build_qkview(tmp_path, {"var/log/ltm": SAMPLE_LTM_LOG}, name="support.qkview")

        result = QkviewParser().process_file(archive, MemoryIndexer())

        assert result.entries_found == 5
        assert (tmp_path / "support" / "var" / "log" / "ltm").is_file()
        assert archive.is_file()

    def test_skips_audit_journal_empty_and_binary(self, qkview_archive):
        indexer = MemoryIndexer()

        QkviewParser().process_file(qkview_archive, indexer)

        lines = [e.line for e in indexer.get_entries()]
        assert not any("audit line" in line or "journal line" in line or "binary" in line for line in lines)

    def test_missing_config_is_not_fatal(self, tmp_path):
        archive = build_qkview(tmp_path, {"var/log/ltm": SAMPLE_LTM_LOG})

        result = QkviewParser().process_file(archive, MemoryIndexer())

        assert result.device_config is None
        assert result.entries_found == 5

    def test_config_parse_errors_are_reported(self, tmp_path):
        archive = build_qkview(
            tmp_path,
            {"config/bigip.conf": "ltm virtual /Common/vs_cut {\n", "var/log/ltm": SAMPLE_LTM_LOG},
        )

        result = QkviewParser().process_file(archive, MemoryIndexer())

        assert result.device_config is not None
        assert result.device_config.virtual_servers == {}
        assert len(result.errors) == 1
        assert result.errors[0].startswith("bigip config parse:")

    def test_missing_log_dir_raises(self, tmp_path):
        archive = build_qkview(tmp_path, {"config/bigip.conf": ""})

        with pytest.raises(ArchiveError, match="log directory not found"):
            QkviewParser().process_file(archive, MemoryIndexer())

    def test_not_an_archive_raises(self, tmp_path):
        bogus = tmp_path / "bogus.tar.gz"
        bogus.write_text("not a tarball")

        with pytest.raises(ArchiveError, match="extraction failed"):
            QkviewParser().extract(bogus)

    def test_extract_skips_traversal(self, tmp_path):
        archive = tmp_path / "evil.tar.gz"
        with tarfile.open(archive, "w:gz") as tar:
            for name in ("../escaped.txt", "var/log/ltm"):
                data = b"2024-01-01 00:00:00 error x\n"
                info = tarfile.TarInfo(name)
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))

        dest = QkviewParser().extract(archive)

        assert (dest / "var" / "log" / "ltm").is_file()
        assert not (tmp_path / "escaped.txt").exists()

    @pytest.mark.filterwarnings("error::DeprecationWarning")
    def test_extract_uses_data_filter(self, qkview_archive):
        dest = QkviewParser().extract(qkview_archive)

        assert (dest / "config" / "bigip.conf").is_file()

    def test_nested_log_directories(self, tmp_path):
        archive = build_qkview(
            tmp_path,
            {
                "var/log/ltm": "2024-01-01 00:00:00 error a\n",
                "var/log/restjavad/restjavad.0.log": "2024-01-02 00:00:00 severe b\n",
            },
        )
        indexer = MemoryIndexer()

        result = QkviewParser().process_file(archive, indexer)

        assert result.entries_indexed == 2
        assert {e.severity for e in indexer.get_entries()} == {"ERROR", "SEVERE"}

    def test_is_binary_file(self, tmp_path):
        text = tmp_path / "text.log"
        text.write_text("plain text\twith tabs\n\x1b[0m colours é")
        binary = tmp_path / "data.bin"
        binary.write_bytes(b"abc\x00def")

        parser = QkviewParser()

        assert parser.is_binary_file(text) is False
        assert parser.is_binary_file(binary) is True

    def test_parse_log_file(self, tmp_path):
        path = tmp_path / "ltm"
        path.write_text(SAMPLE_LTM_LOG)

        records, errors = QkviewParser().parse_log_file(path, source="x")

        assert errors == []
        assert len(records) == 5
        assert records[0].line.startswith("Oct 14 13:00:00 2024")

    def test_parse_log_file_missing(self, tmp_path):
        records, errors = QkviewParser().parse_log_file(tmp_path / "absent")

        assert records == []
        assert len(errors) == 1
