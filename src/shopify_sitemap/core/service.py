from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from shopify_sitemap.config import ConfigError
from shopify_sitemap.core.updater import UpdateError
from shopify_sitemap.observability.diagnostics import NULL_SINK
from shopify_sitemap.sitemap import page_count, paginate, render
from shopify_sitemap.storage import MANUAL_UPDATE

if TYPE_CHECKING:
    from datetime import datetime

    from shopify_sitemap.config import ConfigProvider
    from shopify_sitemap.core.updater import SitemapUpdater, UpdateFailure, UpdateResult
    from shopify_sitemap.observability.diagnostics import DiagnosticSink
    from shopify_sitemap.sitemap import SitemapKind
    from shopify_sitemap.storage import SitemapCache, ThrottleStore

XML_CONTENT_TYPE = "application/xml; charset=UTF-8"


@dataclass(frozen=True, slots=True)
class UpdateOutcome:
    ok: bool
    result: UpdateResult | None = None
    reason: UpdateFailure | None = None
    detail: str | None = None
    retry_after_seconds: float | None = None

    @property
    def rate_limited(self) -> bool:
        return self.retry_after_seconds is not None


@dataclass(frozen=True, slots=True)
class SitemapStatus:
    has_data: bool
    kind: SitemapKind | None
    item_count: int
    page_count: int
    stored_at: datetime | None
    expires_at: datetime | None
    sitemap_url: str


class SitemapService:
    """Entry points used by the hosting application.

    ``render_sitemap`` never raises for pipeline failures: it degrades to
    whatever is cached, or to the single-entry fallback document.
    """

    def __init__(
        self,
        *,
        config_provider: ConfigProvider,
        updater: SitemapUpdater,
        cache: SitemapCache,
        throttle: ThrottleStore,
        sink: DiagnosticSink = NULL_SINK,
    ) -> None:
        self._config_provider = config_provider
        self._updater = updater
        self._cache = cache
        self._throttle = throttle
        self._sink = sink

    async def trigger_update(self, *, manual: bool = True) -> UpdateOutcome:
        if manual:
            interval = timedelta(seconds=self._config_provider.get().output.manual_update_interval_seconds)
            wait = self._throttle.acquire(MANUAL_UPDATE, interval)
            if wait > 0:
                self._sink.info("manual_update_rate_limited", retry_after_seconds=round(wait, 1))
                return UpdateOutcome(ok=False, retry_after_seconds=wait)

        try:
            result = await self._updater.update()
        except UpdateError as exc:
            return UpdateOutcome(ok=False, reason=exc.reason, detail=exc.detail)
        return UpdateOutcome(ok=True, result=result)

    async def render_sitemap(self, *, page: int | None = None) -> str:
        config = self._config_provider.get()
        cached = self._cache.get()
        if cached is None:
            try:
                await self._updater.update()
            except (UpdateError, ConfigError) as exc:
                self._sink.warning("render_update_failed", error=str(exc))
            cached = self._cache.get()

        payload = cached.payload if cached is not None else None
        if payload is not None and page is not None:
            payload = paginate(payload, page, config.output.max_urls_per_page)

        return render(payload, flatten=config.source.flatten, site_url=config.site_url)

    def status(self) -> SitemapStatus:
        config = self._config_provider.get()
        cached = self._cache.get()
        if cached is None:
            return SitemapStatus(
                has_data=False,
                kind=None,
                item_count=0,
                page_count=0,
                stored_at=None,
                expires_at=None,
                sitemap_url=config.public_sitemap_url,
            )
        return SitemapStatus(
            has_data=True,
            kind=cached.kind,
            item_count=len(cached.payload),
            page_count=page_count(cached.payload, config.output.max_urls_per_page),
            stored_at=cached.stored_at,
            expires_at=cached.expires_at,
            sitemap_url=config.public_sitemap_url,
        )

    def clear(self) -> None:
        self._cache.clear()
        self._sink.info("sitemap_cache_cleared")
