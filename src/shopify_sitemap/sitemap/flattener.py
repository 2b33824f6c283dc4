from __future__ import annotations

from typing import TYPE_CHECKING

from shopify_sitemap.fetching import FetchError
from shopify_sitemap.observability.diagnostics import NULL_SINK
from shopify_sitemap.sitemap.models import IndexPayload
from shopify_sitemap.sitemap.parser import SitemapParseError, classify_and_parse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shopify_sitemap.fetching import Fetcher
    from shopify_sitemap.observability.diagnostics import DiagnosticSink
    from shopify_sitemap.sitemap.models import SitemapEntry, SitemapIndexEntry


class FlattenLimitError(Exception):
    def __init__(self, ref_count: int, max_refs: int) -> None:
        self.ref_count = ref_count
        self.max_refs = max_refs
        super().__init__(f"sitemap index lists {ref_count} sitemaps, limit is {max_refs}")


class Flattener:
    """Merge the child sitemaps of an index into one ordered entry list.

    Children are fetched one at a time in index order. A child that cannot be
    fetched or parsed is skipped. Nested indexes are not followed.
    """

    def __init__(self, *, fetcher: Fetcher, sink: DiagnosticSink = NULL_SINK) -> None:
        self._fetcher = fetcher
        self._sink = sink

    async def flatten(
        self,
        refs: Sequence[SitemapIndexEntry],
        *,
        max_refs: int | None = None,
    ) -> tuple[SitemapEntry, ...]:
        if max_refs is not None and len(refs) > max_refs:
            raise FlattenLimitError(len(refs), max_refs)

        entries: list[SitemapEntry] = []
        for ref in refs:
            if not ref.location:
                continue
            entries.extend(await self._child_entries(ref.location))

        self._sink.info("flatten_completed", refs=len(refs), entries=len(entries))
        return tuple(entries)

    async def _child_entries(self, url: str) -> tuple[SitemapEntry, ...]:
        try:
            result = await self._fetcher.fetch(url)
        except FetchError as exc:
            self._sink.warning("flatten_ref_skipped", url=url, reason="fetch_failed", error=str(exc))
            return ()

        try:
            payload = classify_and_parse(result.content, sink=self._sink)
        except SitemapParseError as exc:
            self._sink.warning("flatten_ref_skipped", url=url, reason="parse_failed", error=str(exc))
            return ()

        if isinstance(payload, IndexPayload):
            self._sink.warning("flatten_ref_skipped", url=url, reason="nested_index")
            return ()
        return payload.entries
