from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from cmsfixup.model.records import FieldInfo, Record, Term

ACCESS_SCHEME_TAXONOMY = "taxonomy"


class RecordStore(Protocol):
    """What the workflows need from the content platform.

    Implementations wrap whatever actually holds the records; cmsfixup ships an
    in-memory store and a JSON snapshot store.
    """

    def count_records(self) -> int:  # pragma: no cover - interface
        ...

    def iter_record_ids(self) -> Iterator[int]:  # pragma: no cover - interface
        """Yield every record id in ascending order."""
        ...

    def load_record(self, nid: int) -> Record | None:  # pragma: no cover - interface
        """Return an independent copy of the record, or None when it does not exist."""
        ...

    def lookup_alias(self, alias: str) -> str | None:  # pragma: no cover - interface
        """Map a path alias (no leading slash) to its normal path, e.g. ``node/44``."""
        ...

    def has_field(self, record_type: str, field_name: str) -> bool:  # pragma: no cover
        """Whether records of ``record_type`` carry the field ``field_name``."""
        ...

    def field_info(self, field_name: str) -> FieldInfo | None:  # pragma: no cover
        ...

    def find_terms(self, name: str, vocabulary: str) -> list[Term]:  # pragma: no cover
        ...

    def save_revision(self, record: Record, log: str) -> None:  # pragma: no cover
        """Persist ``record`` as a new revision annotated with ``log``."""
        ...

    def iter_unassigned_ids(self, scheme: str) -> Iterator[int]:  # pragma: no cover
        """Yield ids (ascending) of records with no access assignment in ``scheme``."""
        ...

    def assign_access(self, nid: int, access_id: int, scheme: str) -> None:  # pragma: no cover
        ...


__all__ = ["ACCESS_SCHEME_TAXONOMY", "RecordStore"]
