from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from shopify_sitemap.sitemap import FlatPayload, IndexPayload, SitemapEntry, SitemapIndexEntry, SitemapKind
from shopify_sitemap.storage import CACHE_KEY, Database, SqliteSitemapCache
from tests.test_utils.factories import SitemapEntryFactory
from tests.test_utils.fakes import FakeClock, RecordingSink

if TYPE_CHECKING:
    from pathlib import Path

TTL = timedelta(hours=12)


def test_put_and_get_round_trip(database: Database, clock: FakeClock) -> None:
    cache = SqliteSitemapCache(database, clock=clock)
    payload = FlatPayload(
        entries=(
            SitemapEntry(
                location="https://shop.example.com/products/café",
                last_modified="2024-05-01",
                change_frequency="daily",
                priority="0.8",
            ),
            SitemapEntry(location="https://shop.example.com/pages/about"),
        )
    )

    stored = cache.put(payload, TTL)
    fetched = cache.get()

    assert fetched == stored
    assert fetched is not None
    assert fetched.payload == payload
    assert fetched.expires_at == clock.now + TTL


def test_get_empty_returns_none(database: Database) -> None:
    assert SqliteSitemapCache(database).get() is None


def test_put_replaces_single_row(database: Database, clock: FakeClock) -> None:
    cache = SqliteSitemapCache(database, clock=clock)
    cache.put(FlatPayload(entries=tuple(SitemapEntryFactory.build_batch(3))), TTL)
    index = IndexPayload(refs=(SitemapIndexEntry(location="https://shop.example.com/s1.xml", last_modified="2024-01-01"),))

    cache.put(index, TTL)

    fetched = cache.get()
    assert fetched is not None
    assert fetched.kind is SitemapKind.INDEX
    assert fetched.payload == index
    row = database.fetch_one("SELECT COUNT(*) AS n, MAX(kind) AS kind FROM sitemap_cache")
    assert row is not None
    assert (row["n"], row["kind"]) == (1, "index")


def test_expired_row_is_evicted_on_read(database: Database, clock: FakeClock) -> None:
    cache = SqliteSitemapCache(database, clock=clock)
    cache.put(FlatPayload(entries=tuple(SitemapEntryFactory.build_batch(1))), TTL)

    clock.advance(hours=12)

    assert cache.get() is None
    assert database.fetch_one("SELECT cache_key FROM sitemap_cache WHERE cache_key = ?", (CACHE_KEY,)) is None


def test_clear_removes_row(database: Database, clock: FakeClock) -> None:
    cache = SqliteSitemapCache(database, clock=clock)
    cache.put(FlatPayload(entries=tuple(SitemapEntryFactory.build_batch(1))), TTL)

    cache.clear()

    assert cache.get() is None


def test_cache_survives_reopen(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "cache.db"
    payload = FlatPayload(entries=tuple(SitemapEntryFactory.build_batch(2)))

    first = Database(path)
    first.initialize()
    SqliteSitemapCache(first, clock=clock).put(payload, TTL)
    first.close()

    second = Database(path)
    second.initialize()
    try:
        fetched = SqliteSitemapCache(second, clock=clock).get()
    finally:
        second.close()

    assert fetched is not None
    assert fetched.payload == payload


@pytest.mark.parametrize(
    ("payload", "stored_at"),
    [
        ("{not json", "2024-05-01T00:00:00+00:00"),
        ('{"kind": "mystery", "items": []}', "2024-05-01T00:00:00+00:00"),
        ('{"items": []}', "2024-05-01T00:00:00+00:00"),
        ('{"kind": "flat", "items": [{"href": "https://shop.example.com/"}]}', "2024-05-01T00:00:00+00:00"),
        ('{"kind": "flat", "items": []}', "yesterday"),
    ],
)
def test_corrupt_row_is_discarded_as_miss(
    database: Database,
    clock: FakeClock,
    sink: RecordingSink,
    payload: str,
    stored_at: str,
) -> None:
    database.execute(
        "INSERT INTO sitemap_cache (cache_key, kind, payload, stored_at, expires_at) VALUES (?, ?, ?, ?, ?)",
        (CACHE_KEY, "flat", payload, stored_at, "2999-01-01T00:00:00+00:00"),
    )
    cache = SqliteSitemapCache(database, clock=clock, sink=sink)

    assert cache.get() is None
    assert sink.names("warning") == ["cache_row_discarded"]
    assert database.fetch_one("SELECT cache_key FROM sitemap_cache WHERE cache_key = ?", (CACHE_KEY,)) is None
