from __future__ import annotations

from rich.console import Console

from cmsfixup.fixup.report import BatchReport
from cmsfixup.ui.summary import build_summary_table, render_summary


def _render(report: BatchReport) -> str:
    console = Console(record=True, width=80)
    render_summary(report, console=console)
    return console.export_text()


def test_summary_counts_outcomes() -> None:
    report = BatchReport(title="Link fix", modified=[1, 2], unchanged=[3], errors=["x"])
    text = _render(report)
    assert "Link fix" in text
    assert "Modified" in text
    assert "Errors" in text
    assert "Aborted" not in text


def test_summary_for_dry_run_shows_pending() -> None:
    report = BatchReport(title="Link fix", dry_run=True, pending=[4])
    text = _render(report)
    assert "(dry run)" in text
    assert "Needs changes" in text
    assert "Modified" not in text


def test_summary_marks_aborted_batches() -> None:
    report = BatchReport(title="Factsheet categories", errors=["bad"], aborted=True)
    table = build_summary_table(report)
    assert table.row_count == 4
    assert "no changes written" in _render(report)
