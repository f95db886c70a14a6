import json
import logging
import sys
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from cmsfixup.model.records import FieldInfo, Record, Term  # noqa: E402
from cmsfixup.store.memory import MemoryRecordStore  # noqa: E402

SITE_HOST = "www.nlm.nih.gov"


def sample_snapshot() -> dict[str, Any]:
    """A small site: two pages, an article, two factsheets."""
    return {
        "records": [
            {
                "nid": 1,
                "type": "page",
                "title": "About",
                "alias": "about/index.html",
                "status": 0,
                "moderation_state": "draft",
                "fields": {
                    "body": [
                        {
                            "value": (
                                '<p>See <a href="http://www.nlm.nih.gov/about/history.html#early">'
                                'history</a> and <a href="https://www.ncbi.nlm.nih.gov/pubmed.html">'
                                "PubMed</a>.</p>"
                            ),
                            "format": "full_html",
                        }
                    ],
                    "field_sidebar": [
                        {"value": '<ul><li><a href="/pubs/factsheets/genetics.html">Genetics</a></li></ul>'}
                    ],
                    "field_permanence": [],
                },
            },
            {
                "nid": 2,
                "type": "article",
                "title": "Technical Bulletin",
                "alias": "pubs/techbull/nd15",
                "status": 1,
                "fields": {
                    "body": [{"value": "<p>No links here.</p>"}],
                    # article has no sidebar field; this value must never be touched
                    "field_sidebar": [{"value": '<a href="/x.html">x</a>'}],
                },
            },
            {
                "nid": 3,
                "type": "nlm_factsheet",
                "title": "Genetics",
                "alias": "pubs/factsheets/genetics.html",
                "status": 1,
                "fields": {
                    "body": [{"value": "<p>Genetics at the library.</p>"}],
                    "field_alphabetical_view": [],
                    "field_subject_view": [],
                },
            },
            {
                "nid": 4,
                "type": "nlm_factsheet",
                "title": "Databases",
                "alias": "pubs/factsheets/databases.html",
                "status": 1,
                "fields": {
                    "body": [{"value": "<p>Databases.</p>"}],
                    "field_alphabetical_view": [{"tid": 10}],
                    "field_subject_view": [{"tid": 21}],
                },
            },
            {
                "nid": 5,
                "type": "page",
                "title": "Contact",
                "alias": "contact",
                "status": 1,
                "fields": {
                    "body": [{"value": '<p><a href="mailto:ref@nlm.nih.gov">Mail us</a></p>'}],
                    "field_sidebar": [],
                    "field_permanence": [{"tid": 3}],
                },
            },
        ],
        "content_types": {
            "page": ["body", "field_sidebar", "field_permanence"],
            "article": ["body"],
            "nlm_factsheet": ["body", "field_alphabetical_view", "field_subject_view"],
        },
        "fields": {
            "body": {"type": "text_with_summary", "vocabulary": None},
            "field_sidebar": {"type": "text_long", "vocabulary": None},
            "field_permanence": {"type": "taxonomy_term_reference", "vocabulary": "Permanence"},
            "field_alphabetical_view": {
                "type": "taxonomy_term_reference",
                "vocabulary": "alphabetical",
            },
            "field_subject_view": {"type": "taxonomy_term_reference", "vocabulary": "subjects"},
        },
        "terms": [
            {"tid": 1, "name": "NLM Main Pages", "vocabulary": "section"},
            {"tid": 2, "name": "Technical Bulletin", "vocabulary": "section"},
            {"tid": 3, "name": "Permanence Not Guaranteed", "vocabulary": "Permanence"},
            {"tid": 10, "name": "A", "vocabulary": "alphabetical"},
            {"tid": 11, "name": "G", "vocabulary": "alphabetical"},
            {"tid": 20, "name": "Genetics", "vocabulary": "subjects"},
            {"tid": 21, "name": "Databases", "vocabulary": "subjects"},
            {"tid": 22, "name": "Duplicate", "vocabulary": "subjects"},
            {"tid": 23, "name": "Duplicate", "vocabulary": "subjects"},
        ],
        "access": [{"nid": 5, "access_id": 1, "scheme": "taxonomy"}],
    }


def build_memory_store(data: dict[str, Any]) -> MemoryRecordStore:
    return MemoryRecordStore(
        [Record.from_dict(r) for r in data["records"]],
        content_types=data["content_types"],
        fields=[FieldInfo(name, **info) for name, info in data["fields"].items()],
        terms=[Term(**t) for t in data["terms"]],
        access=[(a["nid"], a["access_id"], a["scheme"]) for a in data["access"]],
    )


@pytest.fixture
def store() -> MemoryRecordStore:
    return build_memory_store(sample_snapshot())


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    path = tmp_path / "site.json"
    path.write_text(json.dumps(sample_snapshot(), indent=2), encoding="utf-8")
    return path


@pytest.fixture
def isolate_logging():
    """Isolate logging configuration between tests to prevent CI issues.

    This fixture prevents logging StreamHandler issues that occur in CI environments
    where stderr/stdout streams may be closed during test cleanup.

    Use this fixture explicitly in tests that configure logging (the CLI does).
    """
    # Store original logging state
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    package_logger = logging.getLogger("cmsfixup")
    original_package_level = package_logger.level

    # Clear all handlers to prevent stream access issues
    logging.root.handlers.clear()

    # Add a null handler that won't cause stream issues
    null_handler = logging.NullHandler()
    logging.root.addHandler(null_handler)

    yield

    # Restore original logging state
    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)
    package_logger.setLevel(original_package_level)
