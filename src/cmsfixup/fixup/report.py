"""Per-batch bookkeeping and decision logging.

Every decision a workflow takes about a record (modified, would be modified,
left alone, failed) goes through a ``BatchReport`` so it is both logged as one
line of text and counted for the end-of-run summary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cmsfixup.model.options import RunOptions
from cmsfixup.model.records import Record

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    title: str
    dry_run: bool = False
    modified: list[int] = field(default_factory=list)
    pending: list[int] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    aborted: bool = False

    @classmethod
    def for_run(cls, title: str, options: RunOptions) -> BatchReport:
        return cls(title=title, dry_run=options.dry_run)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def visited(self) -> int:
        return len(self.modified) + len(self.pending) + len(self.unchanged)

    def record_modified(self, record: Record) -> None:
        self.modified.append(record.nid)
        logger.info("Modified node %s at path %s", record.nid, record.path)

    def record_pending(self, record: Record) -> None:
        self.pending.append(record.nid)
        logger.info("Node %s at path %s needs changes", record.nid, record.path)

    def record_unchanged(self, record: Record) -> None:
        self.unchanged.append(record.nid)
        logger.debug("No need for changes on node %s at path %s", record.nid, record.path)

    def record_error(self, message: str) -> None:
        self.errors.append(message)
        logger.error("%s", message)

    def abort(self, reason: str) -> None:
        """Mark the batch as abandoned before any write."""
        self.aborted = True
        logger.warning("%s: %s -> no changes written", self.title, reason)


def log_run_configuration(options: RunOptions) -> None:
    """Log the effective run options for debugging."""
    logger.debug("Run configuration:")
    logger.debug("  Site host: %s", options.site_host)
    logger.debug("  Dry run: %s", "yes" if options.dry_run else "no")
    logger.debug(
        "  Max count: %s", options.max_count if options.max_count is not None else "unbounded"
    )


__all__ = ["BatchReport", "log_run_configuration"]
