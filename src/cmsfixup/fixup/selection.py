from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from cmsfixup.errors import InputError
from cmsfixup.fixup.lookup import load_record_by_alias
from cmsfixup.fixup.report import BatchReport
from cmsfixup.model.options import RunOptions
from cmsfixup.model.records import Record
from cmsfixup.store.base import RecordStore

logger = logging.getLogger(__name__)

RecordHandler = Callable[[Record], None]


def visit_all_records(
    store: RecordStore,
    options: RunOptions,
    report: BatchReport,
    handler: RecordHandler,
) -> None:
    """Call ``handler`` for every record in id order, up to ``options.max_count``."""
    visited = 0
    for nid in store.iter_record_ids():
        if not options.allows(visited):
            logger.debug("Reached max count of %s records", options.max_count)
            return
        visited += 1

        record = store.load_record(nid)
        if record is None:
            report.record_error(f"Couldn't load node {nid}")
            continue
        logger.debug("visiting node %s with path %s", record.nid, record.path)
        handler(record)


def visit_records_by_aliases(
    store: RecordStore,
    aliases: Iterable[str],
    report: BatchReport,
    handler: RecordHandler,
) -> None:
    """Call ``handler`` for the record behind each alias.

    Aliases that do not resolve are reported and skipped; the rest of the batch
    still runs.
    """
    for alias in aliases:
        try:
            record = load_record_by_alias(store, alias)
        except InputError as exc:
            report.record_error(str(exc))
            continue
        handler(record)


__all__ = ["RecordHandler", "visit_all_records", "visit_records_by_aliases"]
