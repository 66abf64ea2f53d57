"""Server statistics.

In-memory counters for storage tier usage and game operations, exposed by
the health endpoint. No framework dependencies.
"""

from __future__ import annotations

import threading
import time
from collections import Counter


class ServerStats:
    """Thread-safe counters for storage tiers and game operations.

    Per-tier counters are keyed by tier name ("remote", "memory", "file").
    A transient failure is a remote tier error that was recovered by falling
    back; a fatal error is a filesystem failure surfaced to the caller.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()

        self._loads: Counter[str] = Counter()
        self._saves: Counter[str] = Counter()
        self._transient_errors: Counter[str] = Counter()
        self.fatal_errors: int = 0

        self.scores_submitted: int = 0
        self.scores_improved: int = 0
        self.visits_recorded: int = 0
        self.new_visitors: int = 0
        self.user_lookups_missed: int = 0

    def record_load(self, tier: str) -> None:
        with self._lock:
            self._loads[tier] += 1

    def record_save(self, tier: str) -> None:
        with self._lock:
            self._saves[tier] += 1

    def record_transient_error(self, tier: str) -> None:
        with self._lock:
            self._transient_errors[tier] += 1

    def record_fatal_error(self) -> None:
        with self._lock:
            self.fatal_errors += 1

    def record_score(self, *, improved: bool) -> None:
        with self._lock:
            self.scores_submitted += 1
            if improved:
                self.scores_improved += 1

    def record_visit(self, *, new: bool) -> None:
        with self._lock:
            self.visits_recorded += 1
            if new:
                self.new_visitors += 1

    def record_lookup_miss(self) -> None:
        with self._lock:
            self.user_lookups_missed += 1

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        with self._lock:
            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "storage": {
                    "loads": dict(self._loads),
                    "saves": dict(self._saves),
                    "transient_errors": dict(self._transient_errors),
                    "fatal_errors": self.fatal_errors,
                },
                "game": {
                    "scores_submitted": self.scores_submitted,
                    "scores_improved": self.scores_improved,
                    "visits_recorded": self.visits_recorded,
                    "new_visitors": self.new_visitors,
                    "user_lookups_missed": self.user_lookups_missed,
                },
            }
