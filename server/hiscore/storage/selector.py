"""Storage selector: picks the backing tier for each document operation.

Tiers are tried in order until one answers:

1. remote KV service, when an endpoint is configured;
2. the in-memory map, on hosts flagged as restricted (no writable disk);
3. otherwise one JSON file per key under the data directory.

The chain is rebuilt from the live config on every call. A remote failure is
logged and the next tier is tried; a filesystem failure or a corrupt
document is logged, counted and propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from hiscore.storage.file_storage import FileDocumentStore
from hiscore.storage.kv_storage import RemoteKVStore
from hiscore.storage.memory_storage import MemoryDocumentStore

if TYPE_CHECKING:
    from hiscore.config import StorageConfig
    from hiscore.core.stats import ServerStats
    from hiscore.storage.base import DocumentStore

log = structlog.get_logger()


class StorageContext:
    """Process-lifetime storage resources: the memory tier and the HTTP client.

    Created at startup and closed at shutdown; the memory tier's contents
    are lost with it.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self.memory: dict[str, str] = {}
        self.http_client = http_client or httpx.AsyncClient()

    async def aclose(self) -> None:
        await self.http_client.aclose()


class StorageSelector:
    """Loads and saves documents through the first tier that answers."""

    def __init__(
        self,
        config: StorageConfig,
        context: StorageContext,
        stats: ServerStats | None = None,
    ) -> None:
        self._config = config
        self._context = context
        self._stats = stats

    def providers(self) -> list[DocumentStore]:
        """Return the ordered tier chain for the current configuration."""
        chain: list[DocumentStore] = []
        if self._config.kv_url:
            chain.append(RemoteKVStore(
                self._context.http_client,
                url=self._config.kv_url,
                token=self._config.kv_token,
                timeout=self._config.kv_timeout_seconds,
            ))
        if self._config.restricted:
            chain.append(MemoryDocumentStore(self._context.memory))
        else:
            chain.append(FileDocumentStore(self._config.data_dir))
        return chain

    async def load(self, key: str, default: Any) -> Any:
        """Return the document stored under ``key``, or ``default`` if absent."""
        for store in self.providers():
            try:
                result = await store.load(key)
            except (OSError, ValueError):
                self._fatal(store, "load", key)
                raise
            if result.ok:
                if self._stats:
                    self._stats.record_load(store.name)
                return default if result.value is None else result.value
            self._transient(store, "load", key, result.error)
        return default

    async def save(self, key: str, document: Any) -> None:
        """Overwrite ``key`` with ``document`` in the first tier that accepts it."""
        for store in self.providers():
            try:
                result = await store.save(key, document)
            except (OSError, ValueError):
                self._fatal(store, "save", key)
                raise
            if result.ok:
                if self._stats:
                    self._stats.record_save(store.name)
                return
            self._transient(store, "save", key, result.error)

    def _transient(self, store: DocumentStore, op: str, key: str, error: str) -> None:
        log.warning("storage_tier_failed", tier=store.name, op=op, key=key, error=error)
        if self._stats:
            self._stats.record_transient_error(store.name)

    def _fatal(self, store: DocumentStore, op: str, key: str) -> None:
        log.error("storage_write_failed" if op == "save" else "storage_read_failed",
                  tier=store.name, key=key, exc_info=True)
        if self._stats:
            self._stats.record_fatal_error()
