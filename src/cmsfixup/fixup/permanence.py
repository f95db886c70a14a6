"""Make sure records carry a permanence classification, then publish them.

Records whose content type has ``field_permanence`` but no value get the
configured permanence term. Sidebar links are normalized on the way. Any record
changed by either step is published and saved as a new revision.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cmsfixup.errors import TermLookupError
from cmsfixup.fixup.link_fix import SIDEBAR_FIELD, fix_record_links
from cmsfixup.fixup.lookup import lookup_term_id
from cmsfixup.fixup.report import BatchReport
from cmsfixup.fixup.selection import visit_all_records, visit_records_by_aliases
from cmsfixup.model.options import RunOptions
from cmsfixup.model.records import Record
from cmsfixup.store.base import RecordStore

logger = logging.getLogger(__name__)

PERMANENCE_FIELD = "field_permanence"
DEFAULT_PERMANENCE_TERM = "Permanence Not Guaranteed"
DEFAULT_PERMANENCE_VOCABULARY = "Permanence"
PUBLISHED_STATE = "published"

PERMANENCE_LOG = "Updated automatically to set permanence and publish"


def ensure_permanence(record: Record, store: RecordStore, permanence_tid: int) -> bool:
    """Give the record the permanence term when it has the field but no value."""
    if not store.has_field(record.type, PERMANENCE_FIELD):
        return False
    current = record.tids(PERMANENCE_FIELD)
    logger.debug("node %s (%s) has permanence %s", record.nid, record.type, current or "unset")
    if current:
        return False
    record.fields[PERMANENCE_FIELD] = [{"tid": permanence_tid}]
    return True


def publish(record: Record) -> None:
    record.status = 1
    if record.moderation_state is not None:
        record.moderation_state = PUBLISHED_STATE


def process_record(
    record: Record,
    store: RecordStore,
    options: RunOptions,
    report: BatchReport,
    permanence_tid: int,
) -> None:
    changed = ensure_permanence(record, store, permanence_tid)
    if fix_record_links(record, store, options, fields=(SIDEBAR_FIELD,)):
        changed = True

    if not changed:
        report.record_unchanged(record)
    elif options.dry_run:
        report.record_pending(record)
    else:
        publish(record)
        store.save_revision(record, PERMANENCE_LOG)
        report.record_modified(record)


def fix_permanence(
    store: RecordStore,
    options: RunOptions,
    report: BatchReport,
    *,
    all_records: bool = False,
    aliases: Iterable[str] = (),
    term: str = DEFAULT_PERMANENCE_TERM,
    vocabulary: str = DEFAULT_PERMANENCE_VOCABULARY,
) -> BatchReport:
    """Run the permanence fix over all records and/or the given aliases.

    The permanence term is resolved first; when it cannot be resolved the batch
    is aborted before any record is visited.
    """
    try:
        permanence_tid = lookup_term_id(store, term, vocabulary)
    except TermLookupError as exc:
        report.record_error(str(exc))
        report.abort("permanence term unavailable")
        return report
    logger.debug("%s tid = %s", term, permanence_tid)

    def handler(record: Record) -> None:
        process_record(record, store, options, report, permanence_tid)

    if all_records:
        visit_all_records(store, options, report, handler)
    visit_records_by_aliases(store, aliases, report, handler)
    return report


__all__ = [
    "DEFAULT_PERMANENCE_TERM",
    "DEFAULT_PERMANENCE_VOCABULARY",
    "PERMANENCE_FIELD",
    "PERMANENCE_LOG",
    "ensure_permanence",
    "fix_permanence",
    "process_record",
    "publish",
]
