from __future__ import annotations

from typing import Any

import pytest

from cmsfixup.fixup.report import BatchReport
from cmsfixup.fixup.sections import DEFAULT_RULES, SectionRule, assign_sections
from cmsfixup.model.options import RunOptions
from cmsfixup.store.memory import MemoryRecordStore

RULES = [SectionRule.parse(text) for text in DEFAULT_RULES]


def _run(store: MemoryRecordStore, options: RunOptions, **kwargs: Any) -> BatchReport:
    return assign_sections(store, options, BatchReport.for_run("Sections", options), **kwargs)


def test_unassigned_records_get_default_or_rule_section(store: MemoryRecordStore) -> None:
    report = _run(store, RunOptions(), rules=RULES)

    assert report.modified == [1, 2, 3, 4]
    assert store.access_rows() == [
        (5, 1, "taxonomy"),
        (1, 1, "taxonomy"),
        (2, 2, "taxonomy"),
        (3, 1, "taxonomy"),
        (4, 1, "taxonomy"),
    ]
    assert list(store.iter_unassigned_ids("taxonomy")) == []


def test_second_run_has_nothing_left(store: MemoryRecordStore) -> None:
    _run(store, RunOptions(), rules=RULES)
    report = _run(store, RunOptions(), rules=RULES)
    assert report.modified == []


def test_unknown_section_aborts_with_zero_writes(store: MemoryRecordStore) -> None:
    rules = [SectionRule.parse("pubs/techbull=Tech Bulletins")]
    report = _run(store, RunOptions(), rules=rules)
    assert report.aborted
    assert "Tech Bulletins" in report.errors[0]
    assert store.access_rows() == [(5, 1, "taxonomy")]


def test_dry_run_and_max_count(store: MemoryRecordStore) -> None:
    report = _run(store, RunOptions(dry_run=True), rules=RULES)
    assert report.pending == [1, 2, 3, 4]
    assert store.access_rows() == [(5, 1, "taxonomy")]

    report = _run(store, RunOptions(max_count=2), rules=RULES)
    assert report.modified == [1, 2]
    assert list(store.iter_unassigned_ids("taxonomy")) == [3, 4]


def test_without_rules_everything_gets_the_default(store: MemoryRecordStore) -> None:
    _run(store, RunOptions(), default_section="Technical Bulletin")
    assert {tid for _, tid, _ in store.access_rows()[1:]} == {2}


def test_section_rule_parse() -> None:
    rule = SectionRule.parse(" /pubs/techbull = Technical Bulletin ")
    assert rule == SectionRule(prefix="pubs/techbull", section="Technical Bulletin")
    assert rule.matches("pubs/techbull/nd15")
    assert rule.matches("/pubs/techbull/nd15")
    assert not rule.matches("pubs/factsheets/x")


@pytest.mark.parametrize("text", ["pubs/techbull", "=Technical Bulletin", "pubs="])
def test_section_rule_parse_rejects_malformed(text: str) -> None:
    with pytest.raises(ValueError, match="Invalid section rule"):
        SectionRule.parse(text)
