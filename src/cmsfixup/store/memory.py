"""Dictionary-backed record store.

Used directly by tests and as the state holder behind ``JsonRecordStore``.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator

from cmsfixup.model.records import FieldInfo, Record, Term

logger = logging.getLogger(__name__)


class MemoryRecordStore:
    def __init__(
        self,
        records: Iterable[Record] = (),
        *,
        content_types: dict[str, Iterable[str]] | None = None,
        fields: Iterable[FieldInfo] = (),
        terms: Iterable[Term] = (),
        access: Iterable[tuple[int, int, str]] = (),
    ) -> None:
        self._records: dict[int, Record] = {r.nid: copy.deepcopy(r) for r in records}
        self._content_types: dict[str, set[str]] = {
            name: set(field_names) for name, field_names in (content_types or {}).items()
        }
        self._fields: dict[str, FieldInfo] = {f.name: f for f in fields}
        self._terms: list[Term] = list(terms)
        self._access: list[tuple[int, int, str]] = list(access)
        # (nid, log) for every saved revision, in save order
        self.saved: list[tuple[int, str]] = []

    # -- reads -----------------------------------------------------------

    def count_records(self) -> int:
        return len(self._records)

    def iter_record_ids(self) -> Iterator[int]:
        yield from sorted(self._records)

    def load_record(self, nid: int) -> Record | None:
        record = self._records.get(nid)
        return copy.deepcopy(record) if record is not None else None

    def lookup_alias(self, alias: str) -> str | None:
        for record in self._records.values():
            if record.alias and record.alias == alias:
                return f"node/{record.nid}"
        return None

    def has_field(self, record_type: str, field_name: str) -> bool:
        return field_name in self._content_types.get(record_type, set())

    def field_info(self, field_name: str) -> FieldInfo | None:
        return self._fields.get(field_name)

    def find_terms(self, name: str, vocabulary: str) -> list[Term]:
        wanted = name.strip().casefold()
        return [
            t for t in self._terms if t.vocabulary == vocabulary and t.name.casefold() == wanted
        ]

    def iter_unassigned_ids(self, scheme: str) -> Iterator[int]:
        assigned = {nid for nid, _, s in self._access if s == scheme}
        yield from (nid for nid in sorted(self._records) if nid not in assigned)

    def access_rows(self) -> list[tuple[int, int, str]]:
        return list(self._access)

    # -- writes ----------------------------------------------------------

    def save_revision(self, record: Record, log: str) -> None:
        stored = copy.deepcopy(record)
        stored.revisions.append(log)
        self._records[record.nid] = stored
        self.saved.append((record.nid, log))
        logger.debug("Saved revision of node %s: %s", record.nid, log)

    def assign_access(self, nid: int, access_id: int, scheme: str) -> None:
        self._access.append((nid, access_id, scheme))


__all__ = ["MemoryRecordStore"]
