from __future__ import annotations

import math
from typing import TYPE_CHECKING

from shopify_sitemap.sitemap.models import FlatPayload, IndexPayload

if TYPE_CHECKING:
    from shopify_sitemap.sitemap.models import SitemapPayload

DEFAULT_MAX_URLS = 2000


def page_count(payload: SitemapPayload | None, max_urls: int = DEFAULT_MAX_URLS) -> int:
    if payload is None:
        return 0
    return math.ceil(len(payload) / max_urls)


def paginate(payload: SitemapPayload, page: int, max_urls: int = DEFAULT_MAX_URLS) -> SitemapPayload:
    """Return the 1-based ``page`` of ``payload`` holding at most ``max_urls`` items."""
    if page < 1:
        msg = "page must be >= 1"
        raise ValueError(msg)
    if max_urls < 1:
        msg = "max_urls must be >= 1"
        raise ValueError(msg)

    start = (page - 1) * max_urls
    end = start + max_urls
    if isinstance(payload, IndexPayload):
        return IndexPayload(refs=payload.refs[start:end])
    return FlatPayload(entries=payload.entries[start:end])
