from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from shopify_sitemap.observability.diagnostics import NULL_SINK
from shopify_sitemap.sitemap.models import SitemapKind, payload_from_dict, payload_to_dict

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from shopify_sitemap.observability.diagnostics import DiagnosticSink
    from shopify_sitemap.sitemap.models import SitemapPayload

    from .database import Database

    Clock = Callable[[], datetime]

CACHE_KEY = "shopify_sitemap"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CachedSitemap:
    payload: SitemapPayload
    stored_at: datetime
    expires_at: datetime

    def __post_init__(self) -> None:
        if self.expires_at < self.stored_at:
            msg = "expires_at cannot precede stored_at"
            raise ValueError(msg)

    @property
    def kind(self) -> SitemapKind:
        return self.payload.kind

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SitemapCache(Protocol):
    def get(self) -> CachedSitemap | None: ...
    def put(self, payload: SitemapPayload, ttl: timedelta) -> CachedSitemap: ...
    def clear(self) -> None: ...


def _validate_ttl(ttl: timedelta) -> None:
    if ttl.total_seconds() <= 0:
        msg = "ttl must be positive"
        raise ValueError(msg)


class InMemorySitemapCache:
    def __init__(self, *, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._entry: CachedSitemap | None = None

    def get(self) -> CachedSitemap | None:
        entry = self._entry
        if entry is not None and entry.is_expired(self._clock()):
            self._entry = None
            return None
        return entry

    def put(self, payload: SitemapPayload, ttl: timedelta) -> CachedSitemap:
        _validate_ttl(ttl)
        now = self._clock()
        self._entry = CachedSitemap(payload=payload, stored_at=now, expires_at=now + ttl)
        return self._entry

    def clear(self) -> None:
        self._entry = None


class SqliteSitemapCache:
    """Single-row cache: the payload and its kind live in one row.

    A row that cannot be decoded is dropped and reported as a miss.
    """

    def __init__(self, db: Database, *, clock: Clock = utc_now, sink: DiagnosticSink = NULL_SINK) -> None:
        self._db = db
        self._clock = clock
        self._sink = sink

    def get(self) -> CachedSitemap | None:
        row = self._db.fetch_one(
            "SELECT kind, payload, stored_at, expires_at FROM sitemap_cache WHERE cache_key = ?",
            (CACHE_KEY,),
        )
        if row is None:
            return None

        try:
            entry = CachedSitemap(
                payload=payload_from_dict(json.loads(row["payload"])),
                stored_at=datetime.fromisoformat(row["stored_at"]),
                expires_at=datetime.fromisoformat(row["expires_at"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            self._sink.warning("cache_row_discarded", error=f"{type(exc).__name__}: {exc}")
            self.clear()
            return None

        if entry.is_expired(self._clock()):
            self.clear()
            return None
        return entry

    def put(self, payload: SitemapPayload, ttl: timedelta) -> CachedSitemap:
        _validate_ttl(ttl)
        now = self._clock()
        entry = CachedSitemap(payload=payload, stored_at=now, expires_at=now + ttl)
        self._db.execute(
            """
            INSERT INTO sitemap_cache (cache_key, kind, payload, stored_at, expires_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(cache_key) DO UPDATE SET
                kind=excluded.kind,
                payload=excluded.payload,
                stored_at=excluded.stored_at,
                expires_at=excluded.expires_at
            """,
            (
                CACHE_KEY,
                payload.kind.value,
                json.dumps(payload_to_dict(payload), ensure_ascii=False),
                entry.stored_at.isoformat(),
                entry.expires_at.isoformat(),
            ),
        )
        return entry

    def clear(self) -> None:
        self._db.execute("DELETE FROM sitemap_cache WHERE cache_key = ?", (CACHE_KEY,))
