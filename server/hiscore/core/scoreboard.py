"""Scoreboard: high scores, unique visitors, stats and the leaderboard.

This is the core business logic. It depends on the StorageSelector for
document persistence, not on any concrete tier.

Each operation is a full load, an in-memory change and a full save of one
document. Nothing serializes concurrent calls: two overlapping updates of
the same document can lose one of them (last writer wins).
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

import structlog

from hiscore.core.errors import InvalidPayload, UserNotFound
from hiscore.core.models import (
    USERS_KEY,
    VISITORS_KEY,
    LeaderboardEntry,
    StatsSummary,
    UserRecord,
    VisitorsDocument,
    users_from_json,
    users_to_json,
    utc_timestamp,
)

if TYPE_CHECKING:
    from hiscore.core.stats import ServerStats
    from hiscore.storage.selector import StorageSelector

log = structlog.get_logger()

DEFAULT_LEADERBOARD_SIZE = 10


def validate_score(value: Any) -> int:
    """Return ``value`` as a non-negative int score. Missing scores count as 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise InvalidPayload("highScore must be an integer")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise InvalidPayload("highScore must be an integer")
        value = int(value)
    if not isinstance(value, int):
        raise InvalidPayload("highScore must be an integer")
    if value < 0:
        raise InvalidPayload("highScore must not be negative")
    return value


def validate_name(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidPayload("name is required")
    return value


class Scoreboard:
    """Game operations over the ``users`` and ``visitors`` documents."""

    def __init__(
        self,
        storage: StorageSelector,
        stats: ServerStats | None = None,
        leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if leaderboard_size < 1:
            raise ValueError(f"leaderboard_size must be at least 1, got {leaderboard_size}")
        self._storage = storage
        self._stats = stats
        self._leaderboard_size = leaderboard_size
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def _load_users(self) -> dict[str, UserRecord]:
        return users_from_json(await self._storage.load(USERS_KEY, {}))

    async def _load_visitors(self) -> VisitorsDocument:
        return VisitorsDocument.from_json(
            await self._storage.load(VISITORS_KEY, {"ips": [], "count": 0})
        )

    async def get_user(self, name: str) -> UserRecord:
        """Return the stored record for ``name``. Raises UserNotFound."""
        users = await self._load_users()
        record = users.get(name)
        if record is None:
            if self._stats:
                self._stats.record_lookup_miss()
            raise UserNotFound(name)
        return record

    async def submit_score(self, name: Any, high_score: Any) -> UserRecord:
        """Keep the best score per user.

        A new record is written only when the user is unknown or the score
        strictly beats the stored one; ties leave ``lastPlayed`` untouched.
        Returns the record stored after the call.
        """
        name = validate_name(name)
        score = validate_score(high_score)

        users = await self._load_users()
        current = users.get(name)
        improved = current is None or score > current.high_score
        if improved:
            users[name] = UserRecord(high_score=score, last_played=utc_timestamp(self._clock()))
            await self._storage.save(USERS_KEY, users_to_json(users))
            log.info("score_improved", name=name, high_score=score,
                     previous=current.high_score if current else None)

        if self._stats:
            self._stats.record_score(improved=improved)
        return users[name]

    async def record_visit(self, client_id: str) -> int:
        """Count ``client_id`` once. Returns the number of unique visitors."""
        visitors = await self._load_visitors()
        is_new = visitors.add(client_id)
        if is_new:
            await self._storage.save(VISITORS_KEY, visitors.to_json())
            log.info("visitor_recorded", count=visitors.count)

        if self._stats:
            self._stats.record_visit(new=is_new)
        return visitors.count

    async def stats(self) -> StatsSummary:
        visitors = await self._load_visitors()
        users = await self._load_users()
        return StatsSummary(unique_visitors=visitors.count, total_users=len(users))

    async def leaderboard(self) -> list[LeaderboardEntry]:
        """Top users by high score, ties broken by name."""
        users = await self._load_users()
        ranked = sorted(users.items(), key=lambda item: (-item[1].high_score, item[0]))
        return [
            LeaderboardEntry(name=name, high_score=record.high_score,
                             last_played=record.last_played)
            for name, record in ranked[:self._leaderboard_size]
        ]
