from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from shopify_sitemap.fetching import FetchError, FetchResult, HttpStatusError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class FakeFetcher:
    """Serves canned bodies by URL; unknown URLs fail with a 404."""

    def __init__(self, results: Mapping[str, bytes | FetchError]) -> None:
        self._results = dict(results)
        self.fetched_urls: list[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.fetched_urls.append(url)
        result = self._results.get(url)
        if result is None:
            raise HttpStatusError(url, 404)
        if isinstance(result, FetchError):
            raise result
        return FetchResult(url=url, status_code=200, content=result)


class SlowFetcher:
    def __init__(self, body: bytes, *, delay: float) -> None:
        self._body = body
        self._delay = delay
        self.started = asyncio.Event()

    async def fetch(self, url: str) -> FetchResult:
        self.started.set()
        await asyncio.sleep(self._delay)
        return FetchResult(url=url, status_code=200, content=self._body)


class FakeResolver:
    def __init__(self, addresses: Mapping[str, Sequence[str]] | None = None) -> None:
        self._addresses = dict(addresses or {})
        self.lookups: list[str] = []

    def __call__(self, hostname: str) -> list[str]:
        self.lookups.append(hostname)
        return list(self._addresses.get(hostname, ()))


class StaticValidator:
    def __init__(self, *, valid: bool = True) -> None:
        self._valid = valid
        self.checked: list[object] = []

    def validate(self, hostname: object) -> bool:
        self.checked.append(hostname)
        return self._valid
