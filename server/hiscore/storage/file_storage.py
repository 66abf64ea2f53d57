"""File-based storage implementation.

Stores each logical key as one whole-document JSON file, pretty-printed:

    data_dir/users.json
    data_dir/visitors.json

Filesystem errors are not handled here; they propagate to the caller.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import structlog

from hiscore.storage.base import StoreResult

log = structlog.get_logger()

_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class FileDocumentStore:
    """DocumentStore backed by one JSON file per key on disk."""

    name = "file"

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        """Return the file holding ``key``, creating the directory if needed."""
        if not _KEY_RE.match(key):
            raise ValueError(f"invalid document key: {key!r}")
        self._data_dir.mkdir(parents=True, exist_ok=True)
        return self._data_dir / f"{key}.json"

    async def load(self, key: str) -> StoreResult:
        path = self._path(key)
        if not path.exists():
            return StoreResult.success(None)
        with open(path, encoding="utf-8") as f:
            return StoreResult.success(json.load(f))

    async def save(self, key: str, value: Any) -> StoreResult:
        path = self._path(key)
        payload = json.dumps(value, indent=2)
        with open(path, "w", encoding="utf-8") as f:
            f.write(payload)
        log.debug("document_written", key=key, path=str(path), size=len(payload))
        return StoreResult.success()
