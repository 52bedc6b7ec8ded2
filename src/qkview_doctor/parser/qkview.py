"""Qkview archive reader.

Unpacks a qkview (tar + gzip), parses `config/bigip.conf` and classifies
every text log under `var/log` into LogRecords handed to an indexer.
"""

import logging
import os
import tarfile
from dataclasses import dataclass, field
from pathlib import Path

from qkview_doctor.errors import ArchiveError
from qkview_doctor.model.device import DeviceConfig
from qkview_doctor.model.log_record import LogRecord
from qkview_doctor.parser.bigip_conf import BigIPConfigParser
from qkview_doctor.parser.log_classifier import DateParseOptions, LogClassifier
from qkview_doctor.providers.base import LogIndexer

logger = logging.getLogger(__name__)

CONFIG_RELPATH = Path("config") / "bigip.conf"
LOG_RELPATH = Path("var") / "log"

# Bytes that may appear in a text file, after file(1)'s encoding detection.
TEXT_BYTES = frozenset([7, 8, 9, 10, 12, 13, 27] + [b for b in range(0x20, 0x100) if b != 0x7F])


@dataclass
class ProcessResult:
    """Outcome of processing one archive."""

    entries_found: int = 0
    entries_indexed: int = 0
    errors: list[str] = field(default_factory=list)
    device_config: DeviceConfig | None = None


def extract_dir_for(archive_path: str | Path) -> Path:
    """Directory an archive unpacks into: the name minus its last extension and any .tar.

    support.qkview -> support, foo.tar.gz -> foo.
    """
    path = Path(archive_path)
    name = path.with_suffix("").name.removesuffix(".tar")
    return path.with_name(name)


class QkviewParser:
    """Reads qkview archives into LogRecords and a DeviceConfig."""

    def __init__(self, date_options: DateParseOptions | None = None) -> None:
        self.classifier = LogClassifier(date_options)

    def process_file(self, file_path: str | Path, indexer: LogIndexer) -> ProcessResult:
        """Extract an archive and index every classifiable log line.

        Raises:
            ArchiveError: The archive cannot be extracted or has no var/log.
        """
        logger.debug("Processing archive %s", file_path)
        result = ProcessResult()
        source = str(file_path)

        extract_dir = self.extract(file_path)

        config_path = extract_dir / CONFIG_RELPATH
        if config_path.is_file():
            config_parser = BigIPConfigParser()
            try:
                result.device_config = config_parser.parse_file(config_path)
            except OSError as e:
                result.errors.append(f"bigip config parse: {e}")
            else:
                for err in config_parser.errors:
                    result.errors.append(f"bigip config parse: {err}")
                logger.info(
                    "Found %d virtual servers and %d pools",
                    len(result.device_config.virtual_servers),
                    len(result.device_config.pools),
                )
        else:
            logger.info("BigIP config not found at %s", config_path)

        log_dir = extract_dir / LOG_RELPATH
        if not log_dir.is_dir():
            raise ArchiveError(f"log directory not found: {log_dir}")

        for path in self._iter_log_files(log_dir, result):
            records, errors = self.parse_log_file(path, source)
            result.entries_found += len(records)
            result.errors.extend(errors)
            for record in records:
                indexer.index(record)
                result.entries_indexed += 1

        return result

    def extract(self, file_path: str | Path) -> Path:
        """Unpack the archive next to itself and return the directory."""
        dest = extract_dir_for(file_path)
        try:
            with tarfile.open(file_path, "r:*") as tar:
                resolved_base = dest.resolve()
                safe_members = []
                for member in tar.getmembers():
                    if not (member.isfile() or member.isdir()):
                        continue
                    member_dest = (resolved_base / member.name).resolve()
                    try:
                        member_dest.relative_to(resolved_base)
                    except ValueError:
                        logger.warning("Skipping tar entry outside archive root: %r", member.name)
                        continue
                    safe_members.append(member)
                dest.mkdir(parents=True, exist_ok=True)
                tar.extractall(path=dest, members=safe_members, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise ArchiveError(f"extraction failed for {file_path}: {e}") from e
        return dest

    def is_binary_file(self, path: str | Path) -> bool:
        """True when the first KiB holds a byte outside the text set."""
        with open(path, "rb") as f:
            head = f.read(1024)
        return any(b not in TEXT_BYTES for b in head)

    def parse_log_file(self, path: str | Path, source: str = "") -> tuple[list[LogRecord], list[str]]:
        """Classify every line of one log file.

        Returns:
            Tuple of (records, errors).
        """
        logger.debug("Processing file: %s", path)
        records: list[LogRecord] = []
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                for line in f:
                    record = self.classifier.to_record(line.rstrip("\r\n"), path=str(path), source=source)
                    if record is not None:
                        records.append(record)
        except OSError as e:
            return records, [f"failed to read {path}: {e}"]
        return records, []

    def _iter_log_files(self, log_dir: Path, result: ProcessResult):
        """Yield text log files, skipping journals, audit logs, empty and binary files."""
        def _on_error(err: OSError) -> None:
            result.errors.append(f"walk error for {err.filename}: {err}")

        for root, dirs, files in os.walk(log_dir, onerror=_on_error):
            dirs[:] = sorted(d for d in dirs if d != "journal")
            for name in sorted(files):
                if "audit" in name:
                    continue
                path = Path(root) / name
                try:
                    if path.stat().st_size == 0 or self.is_binary_file(path):
                        continue
                except OSError as e:
                    result.errors.append(f"binary check failed for {path}: {e}")
                    continue
                yield path
