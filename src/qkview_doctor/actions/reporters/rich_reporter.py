"""Rich Reporter Implementation."""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from qkview_doctor.actions.reporters.base import BaseReporter
from qkview_doctor.model.report import (
    DISPLAY_FORMAT,
    AnalysisResult,
    Recommendation,
    SSLFinding,
    Summary,
    TopError,
    VirtualServerInfo,
)

STATUS_COLORS = {
    "healthy": "green",
    "warning": "yellow",
    "critical": "red",
}

PRIORITY_COLORS = {
    "critical": "red",
    "high": "magenta",
    "medium": "yellow",
    "low": "blue",
}


class RichReporter(BaseReporter):
    """Generates a terminal summary of an analysis using Rich."""

    def report(self, result: AnalysisResult) -> None:
        self.console.print()
        self._print_summary(result.summary, len(result.entry_logs))

        if result.virtual_servers:
            self._print_virtual_servers(result.virtual_servers)
        if result.ssl_findings:
            self._print_ssl_findings(result.ssl_findings)
        if result.top_errors:
            self._print_top_errors(result.top_errors)
        if result.recommendations:
            self._print_recommendations(result.recommendations)

    def _print_summary(self, summary: Summary, entries: int) -> None:
        color = "green"
        if summary.critical:
            color = "red"
        elif summary.warning:
            color = "yellow"

        grid = Table.grid(expand=True)
        grid.add_column()
        grid.add_column(justify="right")
        grid.add_row("Critical virtual servers", f"[red]{summary.critical}[/]")
        grid.add_row("Warning virtual servers", f"[yellow]{summary.warning}[/]")
        grid.add_row("Healthy virtual servers", f"[green]{summary.healthy}[/]")
        grid.add_row("Certificates expiring soon", str(summary.certs_expiring_soon))
        grid.add_row("Log entries analysed", str(entries))

        self.console.print(Panel(grid, title=f"[{color}]Qkview Summary[/]", border_style=color))

    def _print_virtual_servers(self, servers: list[VirtualServerInfo]) -> None:
        table = Table(title="Virtual Servers", show_lines=False)
        table.add_column("Name", style="bold")
        table.add_column("Pool")
        table.add_column("Status")
        table.add_column("Members", justify="right")
        table.add_column("Last Error", style="dim")

        for vs in servers:
            color = STATUS_COLORS.get(vs.status, "white")
            table.add_row(
                escape(vs.name),
                escape(vs.pool or "-"),
                f"[{color}]{vs.status}[/]",
                vs.active_members,
                escape(vs.last_error or ""),
            )
        self.console.print(table)

    def _print_ssl_findings(self, findings: list[SSLFinding]) -> None:
        self.console.print("SSL/TLS Findings", style="bold underline")
        for finding in findings:
            color = "red" if finding.severity == "critical" else "yellow"
            self.console.print(f"[{color}]{escape(f'[{finding.severity}]')} {escape(finding.message)}[/] [dim]({finding.type})[/]")
            if finding.detail:
                self.console.print(f"   [dim]Detail:[/] {escape(finding.detail)}")
            if finding.affected_vs:
                self.console.print(f"   [dim]Affected:[/] {escape(', '.join(finding.affected_vs))}")
        self.console.print()

    def _print_top_errors(self, errors: list[TopError]) -> None:
        table = Table(title="Top Errors")
        table.add_column("Count", justify="right", style="bold")
        table.add_column("Message")
        table.add_column("Last Occurred", style="dim")
        for error in errors:
            table.add_row(str(error.count), escape(error.message), error.last_occurred.strftime(DISPLAY_FORMAT))
        self.console.print(table)

    def _print_recommendations(self, recommendations: list[Recommendation]) -> None:
        self.console.print("Recommendations", style="bold underline")
        for i, rec in enumerate(recommendations, 1):
            color = PRIORITY_COLORS.get(rec.priority, "white")
            self.console.print(f"{i}. [{color}]{escape(f'[{rec.priority}]')}[/] [bold]{escape(rec.title)}[/]")
            self.console.print(f"   {escape(rec.description)}")
            self.console.print(f"   [dim]Impact:[/] {escape(rec.impact)}")
