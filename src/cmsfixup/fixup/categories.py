"""Assign taxonomy categories to records from CSV files.

Each CSV maps a record path (``Factsheet`` column) to a category name
(``Category`` column) and feeds one taxonomy reference field:

- the alphabetical listing feeds ``field_alphabetical_view``
- the subject listing feeds ``field_subject_view``

All CSVs are read and every path and category is resolved before anything is
written. A single unresolved row, unknown path, or misconfigured field aborts
the whole batch, after all problems have been reported.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from cmsfixup.errors import InputError, SourceFileError, TermLookupError
from cmsfixup.fixup.lookup import load_typed_record, lookup_term_id
from cmsfixup.fixup.report import BatchReport
from cmsfixup.model.options import RunOptions
from cmsfixup.store.base import RecordStore

logger = logging.getLogger(__name__)

ALPHA_FIELD = "field_alphabetical_view"
SUBJECT_FIELD = "field_subject_view"
DEFAULT_CONTENT_TYPE = "nlm_factsheet"

PATH_COLUMN = "Factsheet"
CATEGORY_COLUMN = "Category"

CATEGORY_LOG = "Updated automatically to modify views fields"


@dataclass(frozen=True)
class CategorySource:
    csv_path: Path
    field_name: str


# record id -> field -> category term ids
RecordCategories = dict[int, dict[str, list[int]]]


def _add_unique(fields: dict[str, list[int]], field_name: str, tid: int) -> None:
    tids = fields.setdefault(field_name, [])
    if tid not in tids:
        tids.append(tid)


class CategoryAssignments:
    """Record path -> field -> category term ids, in first-seen order, no duplicates.

    Rows are also kept in reading order so paths spelled differently can later be
    merged per record without losing that order.
    """

    def __init__(self) -> None:
        self._by_path: dict[str, dict[str, list[int]]] = {}
        self._rows: list[tuple[str, str, int]] = []

    def add(self, path: str, field_name: str, tid: int) -> None:
        _add_unique(self._by_path.setdefault(path, {}), field_name, tid)
        self._rows.append((path, field_name, tid))

    def paths(self) -> list[str]:
        return list(self._by_path)

    def fields_for(self, path: str) -> dict[str, list[int]]:
        return {name: list(tids) for name, tids in self._by_path.get(path, {}).items()}

    def rows(self) -> list[tuple[str, str, int]]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._by_path)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path


def check_category_field(store: RecordStore, content_type: str, field_name: str) -> str:
    """Return the vocabulary a category field draws its terms from.

    Raises:
        InputError: If the field is missing from the content type, unknown, not
            a taxonomy reference, or has no allowed vocabulary
    """
    if not store.has_field(content_type, field_name):
        raise InputError(f"Content type '{content_type}' lacks field '{field_name}'")
    info = store.field_info(field_name)
    if info is None:
        raise InputError(f"Installation lacks field '{field_name}'")
    if not info.is_taxonomy:
        raise InputError(f"field '{field_name}' is not a taxonomy_term_reference")
    if not info.vocabulary:
        raise InputError(f"couldn't find allowed vocabularies of field '{field_name}'")
    logger.debug("field '%s' has vocabulary '%s'", field_name, info.vocabulary)
    return info.vocabulary


def read_category_csv(
    store: RecordStore,
    source: CategorySource,
    content_type: str,
    assignments: CategoryAssignments,
) -> list[str]:
    """Read one CSV into ``assignments`` and return every problem found.

    Raises:
        SourceFileError: If the CSV cannot be opened or decoded
    """
    try:
        vocabulary = check_category_field(store, content_type, source.field_name)
    except InputError as exc:
        return [str(exc)]

    csv_path = source.csv_path
    problems: list[str] = []
    try:
        with csv_path.open(newline="", encoding="utf-8-sig") as f:
            reader = csv.reader(f)
            headers = next(reader, None) or []
            if len(headers) < 2:
                return [f"Expected at least two columns in csv {csv_path}"]
            logger.debug("Got headers from %s: %s", csv_path, headers)

            headers = [h.strip() for h in headers]
            if PATH_COLUMN not in headers or CATEGORY_COLUMN not in headers:
                return [
                    f"Couldn't find the '{PATH_COLUMN}' and '{CATEGORY_COLUMN}' columns "
                    f"in csv {csv_path}"
                ]
            ncol = len(headers)
            path_col = headers.index(PATH_COLUMN)
            category_col = headers.index(CATEGORY_COLUMN)

            for row in reader:
                if not any(cell.strip() for cell in row):
                    continue
                lineno = reader.line_num
                if len(row) != ncol:
                    problems.append(
                        f"Line {lineno} of {csv_path} does not have {ncol} columns, skipping"
                    )
                    continue

                path = row[path_col].strip()
                category = row[category_col].strip()
                try:
                    tid = lookup_term_id(store, category, vocabulary)
                except TermLookupError as exc:
                    problems.append(f"{exc} at line {lineno} of {csv_path}")
                    continue
                assignments.add(path, source.field_name, tid)
    except OSError as exc:
        raise SourceFileError(f"Couldn't open {csv_path} for reading: {exc.strerror or exc}") from exc
    except (UnicodeDecodeError, csv.Error) as exc:
        raise SourceFileError(f"Couldn't read {csv_path}: {exc}") from exc

    return problems


def check_paths(
    store: RecordStore, assignments: CategoryAssignments, content_type: str
) -> tuple[RecordCategories, list[str]]:
    """Resolve every path to a record of ``content_type``.

    Returns the assignments keyed by record id and the problems found. Paths
    that name the same record (``/a`` and ``a``, an alias and ``node/<nid>``)
    are merged, tids in row order without duplicates.
    """
    nids: dict[str, int] = {}
    problems: list[str] = []
    for path in assignments.paths():
        try:
            nids[path] = load_typed_record(store, path, content_type).nid
        except InputError as exc:
            problems.append(str(exc))

    by_record: RecordCategories = {}
    for path, field_name, tid in assignments.rows():
        if path in nids:
            _add_unique(by_record.setdefault(nids[path], {}), field_name, tid)
    return by_record, problems


def apply_assignments(
    store: RecordStore,
    by_record: RecordCategories,
    options: RunOptions,
    report: BatchReport,
) -> BatchReport:
    """Write the category fields of every addressed record that needs a change."""
    for nid, fields in by_record.items():
        record = store.load_record(nid)
        if record is None:
            report.record_error(f"Couldn't load node {nid}")
            continue

        changed = False
        for field_name, tids in fields.items():
            if record.tids(field_name) != tids:
                record.fields[field_name] = [{"tid": tid} for tid in tids]
                changed = True

        if not changed:
            report.record_unchanged(record)
        elif options.dry_run:
            report.record_pending(record)
        else:
            store.save_revision(record, CATEGORY_LOG)
            report.record_modified(record)
    return report


def assign_categories_from_csv(
    store: RecordStore,
    sources: Iterable[CategorySource],
    options: RunOptions,
    report: BatchReport,
    content_type: str = DEFAULT_CONTENT_TYPE,
) -> BatchReport:
    """Read every CSV, validate everything, then write only if nothing failed."""
    assignments = CategoryAssignments()
    problems: list[str] = []
    for source in sources:
        problems.extend(read_category_csv(store, source, content_type, assignments))
    by_record, path_problems = check_paths(store, assignments, content_type)
    problems.extend(path_problems)

    if problems:
        for message in problems:
            report.record_error(message)
        report.abort(f"{len(problems)} input problem(s)")
        return report

    logger.debug("Resolved categories for %d paths, %d records", len(assignments), len(by_record))
    return apply_assignments(store, by_record, options, report)


__all__ = [
    "ALPHA_FIELD",
    "CATEGORY_COLUMN",
    "CATEGORY_LOG",
    "CategoryAssignments",
    "CategorySource",
    "DEFAULT_CONTENT_TYPE",
    "PATH_COLUMN",
    "RecordCategories",
    "SUBJECT_FIELD",
    "apply_assignments",
    "assign_categories_from_csv",
    "check_category_field",
    "check_paths",
    "read_category_csv",
]
