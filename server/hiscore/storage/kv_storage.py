"""Remote key-value storage over a Redis-compatible REST API.

Speaks the Vercel KV / Upstash REST protocol: each command is POSTed to the
endpoint as a JSON array (``["GET", key]``, ``["SET", key, value]``) with a
bearer token, and answered with ``{"result": ...}`` or ``{"error": ...}``.
Documents are stored JSON-encoded.

Every failure is returned as a transient StoreResult instead of raised, so
the selector can fall back to a local tier.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from hiscore.storage.base import StoreResult


class RemoteStoreError(Exception):
    """The remote store answered, but with an error payload."""


class RemoteKVStore:
    """DocumentStore backed by a remote KV service."""

    name = "remote"

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        token: str = "",
        timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._url = url.rstrip("/")
        self._token = token
        self._timeout = timeout

    async def _command(self, *args: str) -> Any:
        headers = {"content-type": "application/json"}
        if self._token:
            headers["authorization"] = f"Bearer {self._token}"
        resp = await self._client.post(
            self._url,
            content=json.dumps(list(args)),
            headers=headers,
            timeout=self._timeout,
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise RemoteStoreError(f"unexpected response: {body!r}")
        if body.get("error"):
            raise RemoteStoreError(str(body["error"]))
        return body.get("result")

    async def load(self, key: str) -> StoreResult:
        try:
            raw = await self._command("GET", key)
            if raw is None:
                return StoreResult.success(None)
            if not isinstance(raw, str):
                raise RemoteStoreError(f"unexpected value type: {type(raw).__name__}")
            return StoreResult.success(json.loads(raw))
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, RemoteStoreError) as e:
            return StoreResult.transient(f"{type(e).__name__}: {e}")

    async def save(self, key: str, value: Any) -> StoreResult:
        try:
            await self._command("SET", key, json.dumps(value))
            return StoreResult.success()
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError, RemoteStoreError) as e:
            return StoreResult.transient(f"{type(e).__name__}: {e}")
