"""Resolve operator input (path aliases, category names) against the record store."""

from __future__ import annotations

import logging
import re

from cmsfixup.errors import (
    AmbiguousTermError,
    RecordNotFoundError,
    TermNotFoundError,
    WrongContentTypeError,
)
from cmsfixup.model.records import Record
from cmsfixup.store.base import RecordStore

logger = logging.getLogger(__name__)

_NORMAL_PATH_RE = re.compile(r"^node/(?P<nid>\d+)/?$")


def strip_leading_slash(alias: str) -> str:
    """Drop one leading slash: ``/pubs/a`` -> ``pubs/a``."""
    return alias[1:] if alias.startswith("/") else alias


def _nid_from_normal_path(path: str) -> int | None:
    m = _NORMAL_PATH_RE.match(path)
    return int(m.group("nid")) if m else None


def resolve_record_path(store: RecordStore, alias: str) -> int | None:
    """Map a path alias or a normal path (``node/44``) to a record id.

    The alias is tried first; when the store does not know it, the value may
    already be a normal path.
    """
    alias = strip_leading_slash(alias.strip())
    normal = store.lookup_alias(alias)
    if normal is not None:
        logger.debug("got normal path %s for %s", normal, alias)
        return _nid_from_normal_path(normal)
    return _nid_from_normal_path(alias)


def load_record_by_alias(store: RecordStore, alias: str) -> Record:
    """Load the record a path points to.

    Raises:
        RecordNotFoundError: If the path does not resolve to an existing record
    """
    nid = resolve_record_path(store, alias)
    record = store.load_record(nid) if nid is not None else None
    if record is None:
        raise RecordNotFoundError(alias)
    logger.debug("got node %s for %s", record.nid, alias)
    return record


def load_typed_record(store: RecordStore, alias: str, content_type: str) -> Record:
    """Load the record a path points to and check its content type.

    Raises:
        RecordNotFoundError: If the path does not resolve to an existing record
        WrongContentTypeError: If the record is not of ``content_type``
    """
    record = load_record_by_alias(store, alias)
    if record.type != content_type:
        raise WrongContentTypeError(record.nid, alias, content_type, record.type)
    return record


def lookup_term_id(store: RecordStore, name: str, vocabulary: str) -> int:
    """Return the id of the single term called ``name`` in ``vocabulary``.

    Raises:
        TermNotFoundError: If no term has that name
        AmbiguousTermError: If several terms share that name
    """
    terms = store.find_terms(name, vocabulary)
    if not terms:
        raise TermNotFoundError(name, vocabulary)
    if len(terms) > 1:
        raise AmbiguousTermError(name, vocabulary, len(terms))
    return terms[0].tid


__all__ = [
    "load_record_by_alias",
    "load_typed_record",
    "lookup_term_id",
    "resolve_record_path",
    "strip_leading_slash",
]
