from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from .cache import utc_now

if TYPE_CHECKING:
    from datetime import timedelta

    from .cache import Clock
    from .database import Database

MANUAL_UPDATE = "manual_update"


class ThrottleStore(Protocol):
    def acquire(self, name: str, interval: timedelta) -> float:
        """Record a trigger and return 0, or return the seconds left to wait."""
        ...


def _remaining(last: datetime | None, now: datetime, interval: timedelta) -> float:
    if last is None:
        return 0.0
    return max(0.0, (last + interval - now).total_seconds())


class InMemoryThrottle:
    def __init__(self, *, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._last: dict[str, datetime] = {}

    def acquire(self, name: str, interval: timedelta) -> float:
        now = self._clock()
        wait = _remaining(self._last.get(name), now, interval)
        if wait > 0:
            return wait
        self._last[name] = now
        return 0.0


class SqliteThrottle:
    def __init__(self, db: Database, *, clock: Clock = utc_now) -> None:
        self._db = db
        self._clock = clock

    def acquire(self, name: str, interval: timedelta) -> float:
        now = self._clock()
        with self._db.transaction() as connection:
            row = connection.execute("SELECT triggered_at FROM update_throttle WHERE name = ?", (name,)).fetchone()
            last = datetime.fromisoformat(row["triggered_at"]) if row else None
            wait = _remaining(last, now, interval)
            if wait > 0:
                return wait
            connection.execute(
                """
                INSERT INTO update_throttle (name, triggered_at) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET triggered_at=excluded.triggered_at
                """,
                (name, now.isoformat()),
            )
        return 0.0
