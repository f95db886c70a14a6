"""Give every record without an access assignment a section term.

Records default to one section; records whose alias starts with a rule's
prefix get that rule's section instead (first matching rule wins).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cmsfixup.errors import TermLookupError
from cmsfixup.fixup.lookup import lookup_term_id, strip_leading_slash
from cmsfixup.fixup.report import BatchReport
from cmsfixup.model.options import RunOptions
from cmsfixup.store.base import ACCESS_SCHEME_TAXONOMY, RecordStore

logger = logging.getLogger(__name__)

SECTION_VOCABULARY = "section"
DEFAULT_SECTION = "NLM Main Pages"
DEFAULT_RULES = ("pubs/techbull=Technical Bulletin",)


@dataclass(frozen=True)
class SectionRule:
    prefix: str
    section: str

    @classmethod
    def parse(cls, text: str) -> SectionRule:
        """Parse ``PREFIX=SECTION NAME``.

        Raises:
            ValueError: If either side is empty or there is no ``=``
        """
        prefix, sep, section = text.partition("=")
        prefix = strip_leading_slash(prefix.strip())
        section = section.strip()
        if not sep or not prefix or not section:
            raise ValueError(f"Invalid section rule '{text}'. Expected PREFIX=SECTION")
        return cls(prefix=prefix, section=section)

    def matches(self, alias: str) -> bool:
        return strip_leading_slash(alias).startswith(self.prefix)


def resolve_sections(
    store: RecordStore,
    default_section: str,
    rules: Sequence[SectionRule],
    vocabulary: str,
) -> tuple[int | None, list[tuple[SectionRule, int]], list[str]]:
    """Look up every section name up front. Returns (default tid, rule tids, problems)."""
    problems: list[str] = []
    default_tid: int | None = None
    try:
        default_tid = lookup_term_id(store, default_section, vocabulary)
        logger.info("%s tid = %s", default_section, default_tid)
    except TermLookupError as exc:
        problems.append(str(exc))

    rule_tids: list[tuple[SectionRule, int]] = []
    for rule in rules:
        try:
            tid = lookup_term_id(store, rule.section, vocabulary)
        except TermLookupError as exc:
            problems.append(str(exc))
            continue
        logger.info("%s tid = %s", rule.section, tid)
        rule_tids.append((rule, tid))
    return default_tid, rule_tids, problems


def assign_sections(
    store: RecordStore,
    options: RunOptions,
    report: BatchReport,
    *,
    default_section: str = DEFAULT_SECTION,
    rules: Iterable[SectionRule] = (),
    vocabulary: str = SECTION_VOCABULARY,
    scheme: str = ACCESS_SCHEME_TAXONOMY,
) -> BatchReport:
    rules = list(rules)
    default_tid, rule_tids, problems = resolve_sections(store, default_section, rules, vocabulary)
    if problems or default_tid is None:
        for message in problems:
            report.record_error(message)
        report.abort("section terms unavailable")
        return report

    # Materialize first: assigning while iterating would change the unassigned set
    pending_ids = list(store.iter_unassigned_ids(scheme))
    visited = 0
    for nid in pending_ids:
        if not options.allows(visited):
            logger.debug("Reached max count of %s records", options.max_count)
            break
        visited += 1

        record = store.load_record(nid)
        if record is None:
            report.record_error(f"Couldn't load node {nid}")
            continue

        tid = default_tid
        for rule, rule_tid in rule_tids:
            if record.alias and rule.matches(record.alias):
                tid = rule_tid
                break

        if options.dry_run:
            logger.info("node %s would get tid %s", nid, tid)
            report.pending.append(nid)
            continue
        store.assign_access(nid, tid, scheme)
        logger.info("node %s => tid %s", nid, tid)
        report.modified.append(nid)
    return report


__all__ = [
    "DEFAULT_RULES",
    "DEFAULT_SECTION",
    "SECTION_VOCABULARY",
    "SectionRule",
    "assign_sections",
    "resolve_sections",
]
