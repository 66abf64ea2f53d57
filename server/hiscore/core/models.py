"""hiscore core internal data models.

These are plain dataclasses with no framework dependencies.
Stored JSON documents are converted to/from these at the storage boundary,
coercing malformed fields instead of passing them through.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

log = structlog.get_logger()

# Logical document keys.
USERS_KEY = "users"
VISITORS_KEY = "visitors"


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-10-19T12:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _coerce_score(value: Any) -> int:
    """Best-effort conversion of a stored score to a non-negative int."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return _coerce_score(float(value))
        except ValueError:
            return 0
    return 0


@dataclass(frozen=True)
class UserRecord:
    high_score: int
    last_played: str

    @classmethod
    def from_json(cls, raw: dict) -> UserRecord:
        last_played = raw.get("lastPlayed", "")
        return cls(
            high_score=_coerce_score(raw.get("highScore", 0)),
            last_played=last_played if isinstance(last_played, str) else "",
        )

    def to_json(self) -> dict:
        return {"highScore": self.high_score, "lastPlayed": self.last_played}


def users_from_json(raw: Any) -> dict[str, UserRecord]:
    """Parse the ``users`` document (name -> record), dropping unusable entries."""
    if not isinstance(raw, dict):
        log.warning("users_document_malformed", type=type(raw).__name__)
        return {}
    users: dict[str, UserRecord] = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            log.warning("user_entry_dropped", name=name, type=type(entry).__name__)
            continue
        users[str(name)] = UserRecord.from_json(entry)
    return users


def users_to_json(users: dict[str, UserRecord]) -> dict:
    return {name: record.to_json() for name, record in users.items()}


@dataclass
class VisitorsDocument:
    """Tracked client identifiers. ``count`` always equals ``len(ips)``."""

    ips: list[str] = field(default_factory=list)
    count: int = 0

    @classmethod
    def from_json(cls, raw: Any) -> VisitorsDocument:
        if not isinstance(raw, dict):
            log.warning("visitors_document_malformed", type=type(raw).__name__)
            return cls()
        raw_ips = raw.get("ips") or []
        if not isinstance(raw_ips, list):
            raw_ips = []
        ips = list(dict.fromkeys(str(ip) for ip in raw_ips))
        if raw.get("count") != len(ips):
            log.warning("visitor_count_repaired", stored=raw.get("count"), actual=len(ips))
        return cls(ips=ips, count=len(ips))

    def to_json(self) -> dict:
        return {"ips": list(self.ips), "count": self.count}

    def add(self, client_id: str) -> bool:
        """Track ``client_id``. Returns False if it was already known."""
        if client_id in self.ips:
            return False
        self.ips.append(client_id)
        self.count += 1
        return True


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    high_score: int
    last_played: str

    def to_json(self) -> dict:
        return {"name": self.name, "highScore": self.high_score, "lastPlayed": self.last_played}


@dataclass(frozen=True)
class StatsSummary:
    unique_visitors: int
    total_users: int

    def to_json(self) -> dict:
        return {"uniqueVisitors": self.unique_visitors, "totalUsers": self.total_users}
