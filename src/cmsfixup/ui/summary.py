"""End-of-batch summary rendered with rich."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from cmsfixup.fixup.report import BatchReport


def build_summary_table(report: BatchReport) -> Table:
    title = report.title + (" (dry run)" if report.dry_run else "")
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Outcome")
    table.add_column("Records", justify="right")

    if report.dry_run:
        table.add_row("Needs changes", str(len(report.pending)))
    else:
        table.add_row("Modified", str(len(report.modified)))
    table.add_row("Unchanged", str(len(report.unchanged)))
    table.add_row("Errors", str(len(report.errors)), style="red" if report.errors else None)
    if report.aborted:
        table.add_row("Aborted", "no changes written", style="red")
    return table


def render_summary(report: BatchReport, console: Console | None = None) -> None:
    console = console or Console()
    console.print(build_summary_table(report))


__all__ = ["build_summary_table", "render_summary"]
