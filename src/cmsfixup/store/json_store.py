"""Record store backed by a JSON snapshot file.

Snapshot layout::

    {
      "records": [{"nid": 1, "type": "page", "alias": "about", "fields": {...}}, ...],
      "content_types": {"page": ["body", "field_sidebar"], ...},
      "fields": {"field_subject_view": {"type": "taxonomy_term_reference",
                                        "vocabulary": "subjects"}, ...},
      "terms": [{"tid": 3, "name": "Genetics", "vocabulary": "subjects"}, ...],
      "access": [{"nid": 1, "access_id": 3, "scheme": "taxonomy"}, ...]
    }

Every write is flushed to disk immediately, so each saved revision is committed
independently of the rest of the batch.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from cmsfixup.errors import StoreError
from cmsfixup.model.records import FieldInfo, Record, Term
from cmsfixup.store.json_io import atomic_write_text, read_snapshot, snapshot_to_json
from cmsfixup.store.memory import MemoryRecordStore

logger = logging.getLogger(__name__)


class JsonRecordStore(MemoryRecordStore):
    def __init__(self, path: Path, data: dict[str, Any]) -> None:
        try:
            records = [Record.from_dict(r) for r in data.get("records") or []]
            fields = [
                FieldInfo(name=name, type=str(info["type"]), vocabulary=info.get("vocabulary"))
                for name, info in (data.get("fields") or {}).items()
            ]
            terms = [
                Term(tid=int(t["tid"]), name=str(t["name"]), vocabulary=str(t["vocabulary"]))
                for t in data.get("terms") or []
            ]
            access = [
                (int(a["nid"]), int(a["access_id"]), str(a["scheme"]))
                for a in data.get("access") or []
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Record store {path} is malformed: {exc!r}") from exc

        super().__init__(
            records,
            content_types=data.get("content_types") or {},
            fields=fields,
            terms=terms,
            access=access,
        )
        self.path = path

    @classmethod
    def open(cls, path: Path) -> JsonRecordStore:
        store = cls(path, read_snapshot(path))
        logger.debug("Opened record store %s with %d records", path, store.count_records())
        return store

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "records": [self._records[nid].to_dict() for nid in sorted(self._records)],
            "content_types": {
                name: sorted(field_names) for name, field_names in self._content_types.items()
            },
            "fields": {
                f.name: {"type": f.type, "vocabulary": f.vocabulary} for f in self._fields.values()
            },
            "terms": [{"tid": t.tid, "name": t.name, "vocabulary": t.vocabulary} for t in self._terms],
            "access": [
                {"nid": nid, "access_id": access_id, "scheme": scheme}
                for nid, access_id, scheme in self._access
            ],
        }

    def flush(self) -> None:
        try:
            atomic_write_text(self.path, snapshot_to_json(self.to_snapshot()) + "\n")
        except OSError as exc:
            raise StoreError(f"Couldn't write record store {self.path}: {exc}") from exc

    def save_revision(self, record: Record, log: str) -> None:
        super().save_revision(record, log)
        self.flush()

    def assign_access(self, nid: int, access_id: int, scheme: str) -> None:
        super().assign_access(nid, access_id, scheme)
        self.flush()


__all__ = ["JsonRecordStore"]
