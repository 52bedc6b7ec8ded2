"""SSL Analyzer - SSL/TLS posture findings from log lines."""

import re

from qkview_doctor.analyzer.text import truncate
from qkview_doctor.model.log_record import CRITICAL, ERROR, SEVERE, WARNING, LogRecord
from qkview_doctor.model.report import SSLFinding

DETAIL_MAX_LEN = 200

# Checked in order; the first one present names the weak cipher.
WEAK_CIPHERS = ("rc4", "des", "null", "export", "md5")


class SSLAnalyzer:
    """Detects certificate expiry, obsolete protocols, weak ciphers and handshake failures.

    Findings are deduplicated on (type, message); the first record that
    produces a key wins, later ones are dropped even when their detail or
    affected virtual servers differ.
    """

    def __init__(self) -> None:
        self.cert_expiry_re = re.compile(
            r"certificate.*expir|cert.*expir|ssl.*expir|expir.*certificate", re.IGNORECASE
        )
        self.tls_version_re = re.compile(r"TLS\s*(1\.0|1\.1|1\.2|1\.3)|SSLv[23]", re.IGNORECASE | re.ASCII)
        self.cipher_re = re.compile(r"cipher|RC4|DES|MD5|NULL|EXPORT|WEAK", re.IGNORECASE)
        self.handshake_re = re.compile(
            r"ssl\s*handshake|handshake\s*fail|certificate\s*verify", re.IGNORECASE | re.ASCII
        )
        self.virtual_server_re = re.compile(r"vs_[\w-]+|virtual[-_]?server[\s:]+(\S+)", re.IGNORECASE | re.ASCII)

    def analyze(self, records: list[LogRecord]) -> list[SSLFinding]:
        findings: list[SSLFinding] = []
        seen: set[str] = set()

        def _add(finding: SSLFinding | None) -> None:
            if finding is None or finding.dedup_key in seen:
                return
            seen.add(finding.dedup_key)
            findings.append(finding)

        for record in records:
            line = record.line

            if self.cert_expiry_re.search(line):
                _add(self._cert_finding(record))

            if self.tls_version_re.search(line):
                _add(self._tls_version_finding(record))

            if self.cipher_re.search(line) and record.severity in (ERROR, WARNING, CRITICAL):
                _add(self._cipher_finding(record))

            if self.handshake_re.search(line) and record.severity in (ERROR, CRITICAL):
                _add(self._handshake_finding(record))

        return findings

    def _cert_finding(self, record: LogRecord) -> SSLFinding:
        severity = "critical" if record.severity in (CRITICAL, SEVERE, ERROR) else "warning"
        return SSLFinding(
            severity=severity,
            type="certificate",
            message="Certificate expiration detected",
            detail=truncate(record.line, DETAIL_MAX_LEN),
            affected_vs=self.extract_virtual_servers(record.line),
        )

    def _tls_version_finding(self, record: LogRecord) -> SSLFinding | None:
        line = record.line.lower()
        if any(token in line for token in ("tls 1.0", "tls1.0", "sslv2", "sslv3")):
            return SSLFinding(
                severity="critical",
                type="cipher",
                message="Obsolete TLS/SSL protocol detected",
                detail="TLS 1.0, SSLv2, and SSLv3 are deprecated and vulnerable",
                affected_vs=self.extract_virtual_servers(record.line),
            )
        if "tls 1.1" in line or "tls1.1" in line:
            return SSLFinding(
                severity="warning",
                type="cipher",
                message="TLS 1.1 protocol in use",
                detail="TLS 1.1 is deprecated, upgrade to TLS 1.2 or 1.3",
                affected_vs=self.extract_virtual_servers(record.line),
            )
        return None

    def _cipher_finding(self, record: LogRecord) -> SSLFinding | None:
        line = record.line.lower()
        for cipher in WEAK_CIPHERS:
            if cipher in line:
                return SSLFinding(
                    severity="critical",
                    type="cipher",
                    message="Weak cipher suite detected",
                    detail=f"Cipher contains: {cipher.upper()}",
                    affected_vs=self.extract_virtual_servers(record.line),
                )
        return None

    def _handshake_finding(self, record: LogRecord) -> SSLFinding:
        return SSLFinding(
            severity="warning",
            type="configuration",
            message="SSL handshake failure detected",
            detail=truncate(record.line, DETAIL_MAX_LEN),
            affected_vs=self.extract_virtual_servers(record.line),
        )

    def extract_virtual_servers(self, line: str) -> tuple[str, ...]:
        """Virtual server tokens in the line, unique, in first-seen order."""
        found: dict[str, None] = {}
        for match in self.virtual_server_re.finditer(line):
            found.setdefault(match.group(0), None)
        return tuple(found)
