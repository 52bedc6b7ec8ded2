"""Summary aggregation over virtual server health and SSL findings."""

from qkview_doctor.model.report import SSLFinding, Summary, VirtualServerInfo


def build_summary(virtual_servers: list[VirtualServerInfo], ssl_findings: list[SSLFinding]) -> Summary:
    """Tally virtual server states and certificate findings."""
    statuses = [vs.status for vs in virtual_servers]
    certs = sum(
        1
        for f in ssl_findings
        if f.type == "certificate" and f.severity in ("critical", "warning")
    )
    return Summary(
        critical=statuses.count("critical"),
        warning=statuses.count("warning"),
        healthy=statuses.count("healthy"),
        certs_expiring_soon=certs,
    )
