from __future__ import annotations

import logging

import pytest

from cmsfixup.fixup.link_fix import (
    LINK_FIX_LOG,
    fix_all_records,
    fix_links,
    fix_record_links,
    fix_records_by_aliases,
)
from cmsfixup.fixup.report import BatchReport
from cmsfixup.model.options import RunOptions
from cmsfixup.store.memory import MemoryRecordStore

OPTIONS = RunOptions(site_host="www.nlm.nih.gov")


def _report(options: RunOptions = OPTIONS) -> BatchReport:
    return BatchReport.for_run("Link fix", options)


def test_fix_all_records_saves_only_changed_records(store: MemoryRecordStore) -> None:
    report = fix_all_records(store, OPTIONS, _report())

    assert report.modified == [1]
    assert report.unchanged == [2, 3, 4, 5]
    assert report.ok
    assert store.saved == [(1, LINK_FIX_LOG)]

    record = store.load_record(1)
    assert record is not None
    body = record.fields["body"][0]["value"]
    assert 'href="/about/history#early"' in body
    assert 'href="https://www.ncbi.nlm.nih.gov/pubmed.html"' in body
    assert record.fields["body"][0]["format"] == "full_html"
    assert 'href="/pubs/factsheets/genetics"' in record.fields["field_sidebar"][0]["value"]
    assert record.revisions == [LINK_FIX_LOG]


def test_fields_missing_from_the_content_type_are_not_touched(store: MemoryRecordStore) -> None:
    fix_all_records(store, OPTIONS, _report())
    article = store.load_record(2)
    assert article is not None
    assert article.fields["field_sidebar"][0]["value"] == '<a href="/x.html">x</a>'


def test_dry_run_writes_nothing(store: MemoryRecordStore) -> None:
    options = RunOptions(dry_run=True)
    report = fix_all_records(store, options, _report(options))

    assert report.pending == [1]
    assert report.modified == []
    assert store.saved == []
    record = store.load_record(1)
    assert record is not None
    assert "history.html" in record.fields["body"][0]["value"]


@pytest.mark.parametrize(("max_count", "visited"), [(0, 0), (1, 1), (2, 2), (50, 5)])
def test_max_count_bounds_visited_records(
    store: MemoryRecordStore, max_count: int, visited: int
) -> None:
    options = RunOptions(max_count=max_count)
    report = fix_all_records(store, options, _report(options))
    assert report.visited == visited


def test_aliases_continue_past_failures(store: MemoryRecordStore) -> None:
    report = fix_records_by_aliases(
        store, ["/about/index.html", "missing/page", "node/5"], OPTIONS, _report()
    )
    assert report.modified == [1]
    assert report.unchanged == [5]
    assert len(report.errors) == 1
    assert "missing/page" in report.errors[0]
    assert not report.ok


def test_fix_links_combines_all_and_aliases(store: MemoryRecordStore) -> None:
    report = fix_links(store, RunOptions(max_count=1), _report(), all_records=True, aliases=["contact"])
    assert report.modified == [1]
    assert report.unchanged == [5]


def test_other_site_host_leaves_absolute_links(store: MemoryRecordStore) -> None:
    record = store.load_record(1)
    assert record is not None
    changed = fix_record_links(record, store, RunOptions(site_host="example.org"))
    # the relative sidebar link still qualifies
    assert changed is True
    assert "http://www.nlm.nih.gov/about/history.html#early" in record.fields["body"][0]["value"]


def test_decisions_are_logged(store: MemoryRecordStore, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="cmsfixup")
    fix_all_records(store, OPTIONS, _report())
    messages = [r.getMessage() for r in caplog.records]
    assert "Modified node 1 at path about/index.html" in messages
    assert "No need for changes on node 5 at path contact" in messages
    assert "found link to http://www.nlm.nih.gov/about/history.html#early" in messages
    assert " -> new href = /about/history#early" in messages
