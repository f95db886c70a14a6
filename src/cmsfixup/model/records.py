"""Record, term and field data structures shared by the store and the workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TAXONOMY_FIELD_TYPE = "taxonomy_term_reference"

# One field value per delta, e.g. {"value": "<p>..</p>", "format": "full_html"}
# for text areas or {"tid": 12} for taxonomy references.
FieldItems = list[dict[str, Any]]


@dataclass(slots=True)
class Record:
    nid: int
    type: str
    title: str = ""
    alias: str = ""
    language: str = "und"
    status: int = 0
    moderation_state: str | None = None
    fields: dict[str, FieldItems] = field(default_factory=dict)
    revisions: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Path used in operator messages: the alias when set, else node/<nid>."""
        return self.alias or f"node/{self.nid}"

    def tids(self, field_name: str) -> list[int]:
        return [int(item["tid"]) for item in self.fields.get(field_name, []) if "tid" in item]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nid": self.nid,
            "type": self.type,
            "title": self.title,
            "alias": self.alias,
            "language": self.language,
            "status": self.status,
            "moderation_state": self.moderation_state,
            "fields": self.fields,
            "revisions": self.revisions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        return cls(
            nid=int(data["nid"]),
            type=str(data["type"]),
            title=str(data.get("title", "")),
            alias=str(data.get("alias", "") or ""),
            language=str(data.get("language", "und")),
            status=int(data.get("status", 0)),
            moderation_state=data.get("moderation_state"),
            fields={k: list(v) for k, v in (data.get("fields") or {}).items()},
            revisions=list(data.get("revisions") or []),
        )


@dataclass(frozen=True, slots=True)
class Term:
    tid: int
    name: str
    vocabulary: str


@dataclass(frozen=True, slots=True)
class FieldInfo:
    name: str
    type: str
    vocabulary: str | None = None

    @property
    def is_taxonomy(self) -> bool:
        return self.type == TAXONOMY_FIELD_TYPE


__all__ = [
    "FieldInfo",
    "FieldItems",
    "Record",
    "TAXONOMY_FIELD_TYPE",
    "Term",
]
