"""Fix links in the text areas of content records.

For every selected record, the body and the sidebar (when the record's content
type has them) are run through ``normalize_links``. A record with at least one
rewritten link is saved as a new revision; other records are left untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cmsfixup.fixup.report import BatchReport
from cmsfixup.fixup.selection import visit_all_records, visit_records_by_aliases
from cmsfixup.model.options import RunOptions
from cmsfixup.model.records import Record
from cmsfixup.store.base import RecordStore
from cmsfixup.transform.links import normalize_links

logger = logging.getLogger(__name__)

BODY_FIELD = "body"
SIDEBAR_FIELD = "field_sidebar"
TEXT_FIELDS = (BODY_FIELD, SIDEBAR_FIELD)

LINK_FIX_LOG = "Updated automatically to fix absolute links and links to .html"


def _log_rewrite(old: str, new: str) -> None:
    logger.debug("found link to %s", old)
    logger.debug(" -> new href = %s", new)


def fix_field_links(record: Record, field_name: str, site_host: str) -> bool:
    """Normalize links in every delta of one text field. Returns True if any changed."""
    changed = False
    for item in record.fields.get(field_name, []):
        html = item.get("value")
        if not isinstance(html, str):
            continue
        result = normalize_links(html, site_host, on_rewrite=_log_rewrite)
        if result.changed:
            item["value"] = result.html
            changed = True
    return changed


def fix_record_links(
    record: Record,
    store: RecordStore,
    options: RunOptions,
    fields: Iterable[str] = TEXT_FIELDS,
) -> bool:
    """Normalize links in the record's text fields, in place.

    Only fields the record's content type actually has are touched.
    """
    changed = False
    for field_name in fields:
        if not store.has_field(record.type, field_name):
            continue
        logger.debug("node %s (%s) has %s", record.nid, record.type, field_name)
        if fix_field_links(record, field_name, options.site_host):
            changed = True
    return changed


def process_record(
    record: Record,
    store: RecordStore,
    options: RunOptions,
    report: BatchReport,
) -> None:
    if not fix_record_links(record, store, options):
        report.record_unchanged(record)
    elif options.dry_run:
        report.record_pending(record)
    else:
        store.save_revision(record, LINK_FIX_LOG)
        report.record_modified(record)


def fix_all_records(store: RecordStore, options: RunOptions, report: BatchReport) -> BatchReport:
    visit_all_records(store, options, report, lambda r: process_record(r, store, options, report))
    return report


def fix_records_by_aliases(
    store: RecordStore,
    aliases: Iterable[str],
    options: RunOptions,
    report: BatchReport,
) -> BatchReport:
    visit_records_by_aliases(
        store, aliases, report, lambda r: process_record(r, store, options, report)
    )
    return report


def fix_links(
    store: RecordStore,
    options: RunOptions,
    report: BatchReport,
    *,
    all_records: bool = False,
    aliases: Iterable[str] = (),
) -> BatchReport:
    """Run the link fix over all records and/or the given aliases."""
    if all_records:
        fix_all_records(store, options, report)
    fix_records_by_aliases(store, aliases, options, report)
    return report


__all__ = [
    "BODY_FIELD",
    "LINK_FIX_LOG",
    "SIDEBAR_FIELD",
    "TEXT_FIELDS",
    "fix_all_records",
    "fix_links",
    "fix_field_links",
    "fix_record_links",
    "fix_records_by_aliases",
    "process_record",
]
