"""Storage interface (port) for whole-document key-value persistence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a single tier operation.

    ``ok`` results carry the loaded value (None when the key is absent).
    Failed results carry a transient error description and tell the
    selector to try the next tier.
    """

    ok: bool
    value: Any = None
    error: str = ""

    @classmethod
    def success(cls, value: Any = None) -> StoreResult:
        return cls(ok=True, value=value)

    @classmethod
    def transient(cls, error: str) -> StoreResult:
        return cls(ok=False, error=error)


class DocumentStore(Protocol):
    """Port: loads and saves JSON documents by logical key."""

    name: str

    async def load(self, key: str) -> StoreResult: ...

    async def save(self, key: str, value: Any) -> StoreResult: ...
