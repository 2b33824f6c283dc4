from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from shopify_sitemap.fetching import FetchError
from shopify_sitemap.observability.diagnostics import NULL_SINK
from shopify_sitemap.sitemap import (
    FlatPayload,
    Flattener,
    FlattenLimitError,
    IndexPayload,
    SitemapKind,
    SitemapParseError,
    classify_and_parse,
    looks_like_index,
)

if TYPE_CHECKING:
    from datetime import datetime

    from shopify_sitemap.config import ConfigProvider, SourceConfig
    from shopify_sitemap.fetching import DomainValidator, Fetcher
    from shopify_sitemap.observability.diagnostics import DiagnosticSink
    from shopify_sitemap.sitemap import SitemapPayload
    from shopify_sitemap.storage import SitemapCache


class UpdateFailure(StrEnum):
    NO_DOMAIN = "no_domain"
    INVALID_DOMAIN = "invalid_domain"
    FETCH_FAILED = "fetch_failed"
    EMPTY_RESPONSE = "empty_response"
    PARSE_FAILED = "parse_failed"
    FLATTEN_FAILED = "flatten_failed"
    TOO_MANY_REFS = "too_many_refs"
    NO_DATA = "no_data"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    IN_PROGRESS = "in_progress"


class UpdateError(Exception):
    def __init__(self, reason: UpdateFailure, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True, slots=True)
class UpdateResult:
    source_url: str
    kind: SitemapKind
    item_count: int
    expires_at: datetime


class SitemapUpdater:
    """Refresh the cached sitemap from the configured store.

    The cache is written once, after the complete payload is built, so a failed
    update leaves whatever was cached before untouched.
    """

    def __init__(
        self,
        *,
        config_provider: ConfigProvider,
        validator: DomainValidator,
        fetcher: Fetcher,
        cache: SitemapCache,
        flattener: Flattener | None = None,
        sink: DiagnosticSink = NULL_SINK,
    ) -> None:
        self._config_provider = config_provider
        self._validator = validator
        self._fetcher = fetcher
        self._cache = cache
        self._flattener = flattener or Flattener(fetcher=fetcher, sink=sink)
        self._sink = sink
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def update(self) -> UpdateResult:
        if self._lock.locked():
            raise UpdateError(UpdateFailure.IN_PROGRESS)

        async with self._lock:
            source = self._config_provider.get().source
            try:
                async with asyncio.timeout(source.deadline_seconds):
                    payload = await self._build_payload(source)
            except TimeoutError as exc:
                self._sink.warning("update_failed", reason=UpdateFailure.DEADLINE_EXCEEDED.value, url=source.sitemap_url)
                raise UpdateError(UpdateFailure.DEADLINE_EXCEEDED, f"exceeded {source.deadline_seconds}s") from exc
            except UpdateError as exc:
                self._sink.warning("update_failed", reason=exc.reason.value, url=source.sitemap_url, detail=exc.detail)
                raise

            cached = self._cache.put(payload, source.cache_ttl)

        self._sink.info("update_succeeded", url=source.sitemap_url, kind=payload.kind.value, items=len(payload))
        return UpdateResult(
            source_url=source.sitemap_url,
            kind=payload.kind,
            item_count=len(payload),
            expires_at=cached.expires_at,
        )

    async def _build_payload(self, source: SourceConfig) -> SitemapPayload:
        if not source.domain:
            raise UpdateError(UpdateFailure.NO_DOMAIN)
        if not await asyncio.to_thread(self._validator.validate, source.domain):
            raise UpdateError(UpdateFailure.INVALID_DOMAIN, source.domain)

        try:
            result = await self._fetcher.fetch(source.sitemap_url)
        except FetchError as exc:
            raise UpdateError(UpdateFailure.FETCH_FAILED, str(exc)) from exc

        if not result.content.strip():
            raise UpdateError(UpdateFailure.EMPTY_RESPONSE)

        hint = SitemapKind.INDEX if looks_like_index(result.content) else None
        try:
            parsed = classify_and_parse(result.content, hint=hint, sink=self._sink)
        except SitemapParseError as exc:
            raise UpdateError(UpdateFailure.PARSE_FAILED, str(exc)) from exc

        payload: SitemapPayload = parsed
        if isinstance(parsed, IndexPayload) and source.flatten:
            payload = await self._flatten(parsed, source)

        if len(payload) == 0:
            raise UpdateError(UpdateFailure.NO_DATA)
        return payload

    async def _flatten(self, index: IndexPayload, source: SourceConfig) -> FlatPayload:
        try:
            entries = await self._flattener.flatten(index.refs, max_refs=source.max_refs)
        except FlattenLimitError as exc:
            raise UpdateError(UpdateFailure.TOO_MANY_REFS, str(exc)) from exc
        if not entries:
            raise UpdateError(UpdateFailure.FLATTEN_FAILED, f"no entries from {len(index.refs)} sitemaps")
        return FlatPayload(entries=entries)
