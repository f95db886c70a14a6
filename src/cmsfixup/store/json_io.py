"""JSON reading and writing for record-store snapshots.

Key features:
- Deterministic JSON serialization with sorted keys
- Atomic file writing to prevent corruption
- Errors surface as ``StoreError`` so the CLI can report them uniformly
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from cmsfixup.errors import StoreError


def snapshot_to_json(data: dict[str, Any], *, pretty: bool = True) -> str:
    """Serialize a snapshot mapping to deterministic JSON."""
    return json.dumps(
        data,
        ensure_ascii=False,
        sort_keys=True,
        indent=2 if pretty else None,
    )


def read_snapshot(path: Path) -> dict[str, Any]:
    """Load a snapshot file, raising StoreError when it cannot be used."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StoreError(f"Couldn't open record store {path}: {exc.strerror or exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoreError(f"Record store {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise StoreError(f"Record store {path} must contain a JSON object")
    return data


def atomic_write_text(path: Path, data: str, *, encoding: str = "utf-8") -> None:
    """Atomically write text to a file by writing to a temp file then replacing.

    Ensures parent directories exist and minimizes risk of partial writes.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", encoding=encoding, dir=str(path.parent), delete=False) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = Path(tmp.name)
    os.replace(tmp_path, path)


__all__ = [
    "atomic_write_text",
    "read_snapshot",
    "snapshot_to_json",
]
