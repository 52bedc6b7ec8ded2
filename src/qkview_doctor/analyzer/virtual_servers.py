"""Virtual Server Analyzer - Per-service health from config and logs."""

from qkview_doctor.analyzer.text import truncate
from qkview_doctor.model.device import DeviceConfig, VirtualServer
from qkview_doctor.model.log_record import LogRecord
from qkview_doctor.model.report import DISPLAY_FORMAT, VirtualServerInfo

LAST_ERROR_MAX_LEN = 100


class VirtualServerAnalyzer:
    """Derives status, member counts and the latest related error per virtual server."""

    def analyze(self, config: DeviceConfig | None, records: list[LogRecord]) -> list[VirtualServerInfo]:
        """One VirtualServerInfo per configured virtual server, sorted by name.

        Without a device configuration there is nothing to report.
        """
        if config is None:
            return []

        # Newest first; stable, so equal timestamps keep input order.
        errors_newest_first = sorted(
            (r for r in records if r.is_error),
            key=lambda r: r.timestamp,
            reverse=True,
        )

        results: list[VirtualServerInfo] = []
        for name in sorted(config.virtual_servers):
            vs = config.virtual_servers[name]
            status, active_members = self._health(config, vs)
            results.append(
                VirtualServerInfo(
                    name=vs.name,
                    pool=vs.pool,
                    status=status,
                    active_members=active_members,
                    last_error=self.find_last_error(vs.name, vs.pool, errors_newest_first),
                )
            )
        return results

    def _health(self, config: DeviceConfig, vs: VirtualServer) -> tuple[str, str]:
        if vs.disabled:
            return "critical", "0/0"

        pool = config.resolve_pool(vs)
        if pool is None:
            return "warning", "0/0"

        active = pool.active_members()
        total = pool.total_members()
        if total == 0 or active == 0:
            status = "critical"
        elif active < total:
            status = "warning"
        else:
            status = "healthy"
        return status, f"{active}/{total}"

    def find_last_error(self, vs_name: str, pool_name: str, errors_newest_first: list[LogRecord]) -> str | None:
        """First error mentioning the virtual server or its pool, newest first.

        An empty name is a substring of every line, so a virtual server with
        no pool takes the newest error overall.
        """
        needles = [vs_name.lower(), pool_name.lower()]
        for record in errors_newest_first:
            line = record.line.lower()
            if any(needle in line for needle in needles):
                message = self.extract_error_message(record.line)
                return f"{message} - {record.timestamp.strftime(DISPLAY_FORMAT)}"
        return None

    @staticmethod
    def extract_error_message(line: str) -> str:
        line = truncate(line, LAST_ERROR_MAX_LEN)
        _, sep, rest = line.partition(": ")
        if sep:
            return rest.strip()
        return line.strip()
