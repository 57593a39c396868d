"""Rich-based build report for terminal output.

Example:
    >>> from sitespine.reporter import RichBuildReporter
    >>>
    >>> reporter = RichBuildReporter()
    >>> # report = state.finish()
    >>> # reporter.report(report)
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sitespine.core.report import BuildReport

logger = logging.getLogger("sitespine.reporter.rich")


class RichBuildReporter:
    """Prints a per-rule statistics table, then failures and warnings.

    Output::

        ┏━━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┳━━━━━━━━┳━━━━━━━━━━┓
        ┃ Rule           ┃ Matched ┃ Written ┃ Cached ┃ Failed ┃ Time     ┃
        ┡━━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━╇━━━━━━━━╇━━━━━━━━━━┩
        │ posts/*        │       3 │       2 │      0 │      1 │   120 ms │
        │ rss.xml        │       1 │       1 │      0 │      0 │     2 ms │
        └────────────────┴─────────┴─────────┴────────┴────────┴──────────┘

    Attributes:
        title: Table title.
    """

    def __init__(self, console: Console | None = None, title: str = "Build Summary") -> None:
        self._console = console or Console()
        self.title = title

    def build_table(self, report: BuildReport) -> Table:
        table = Table(title=self.title)
        table.add_column("Rule", style="cyan")
        table.add_column("Matched", justify="right")
        table.add_column("Written", justify="right", style="green")
        table.add_column("Cached", justify="right", style="dim")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Time", justify="right")

        for stats in report.rule_stats:
            name = f"{stats.rule_name} (aborted)" if stats.aborted else stats.rule_name
            table.add_row(
                escape(name),
                f"{stats.matched:,}",
                f"{stats.written:,}",
                f"{stats.skipped:,}",
                f"{stats.failed:,}",
                f"{stats.duration_ms:.0f} ms",
            )
        return table

    def report(self, report: BuildReport) -> None:
        """Print ``report`` to the console."""
        self._console.print(self.build_table(report))

        for warning in report.warnings:
            self._console.print(f"[yellow]warning:[/yellow] {escape(warning)}", highlight=False)

        if report.failures:
            self._console.print(f"\n[bold red]{len(report.failures)} file(s) failed:[/bold red]")
            for failure in report.failures:
                self._console.print(f"  [red]✗[/red] {escape(str(failure))}", highlight=False)
            self._console.print(
                f"\n[bold red]FAILED[/bold red] {report.total_written:,} written, "
                f"{report.total_failed:,} failed"
            )
        else:
            self._console.print(
                f"\n[bold green]OK[/bold green] {report.total_written:,} written, "
                f"{report.total_skipped:,} cached in {report.duration_ms:.0f} ms"
            )
        logger.debug(f"Reported build with {len(report.rule_stats)} rules")


__all__ = ["RichBuildReporter"]
