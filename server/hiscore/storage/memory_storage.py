"""In-memory storage implementation for hosts without a writable filesystem.

Values live in a dict owned by the StorageContext, so they last exactly as
long as the process. Documents are kept JSON-encoded: later mutation of a
saved or loaded object never changes what is stored.
"""

from __future__ import annotations

import json
from typing import Any

from hiscore.storage.base import StoreResult


class MemoryDocumentStore:
    """DocumentStore over a caller-owned ``key -> JSON text`` mapping."""

    name = "memory"

    def __init__(self, slots: dict[str, str]) -> None:
        self._slots = slots

    async def load(self, key: str) -> StoreResult:
        raw = self._slots.get(key)
        if raw is None:
            return StoreResult.success(None)
        return StoreResult.success(json.loads(raw))

    async def save(self, key: str, value: Any) -> StoreResult:
        self._slots[key] = json.dumps(value)
        return StoreResult.success()
