"""Sitemap-protocol XML output."""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING
from urllib.parse import quote

from lxml import etree

from shopify_sitemap.sitemap.models import SITEMAP_NS, FlatPayload, IndexPayload, SitemapEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shopify_sitemap.sitemap.models import SitemapIndexEntry, SitemapPayload

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
_URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"
_XML_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def escape_location(url: str) -> str:
    """Percent-encode characters that may not appear literally in a URL."""
    return quote(_XML_INVALID_CHARS.sub("", url.strip()), safe=_URL_SAFE_CHARS)


def fallback_entry(site_url: str, today: date) -> SitemapEntry:
    return SitemapEntry(
        location=site_url,
        last_modified=today.isoformat(),
        change_frequency="daily",
        priority="1.0",
    )


def render(
    payload: SitemapPayload | None,
    *,
    flatten: bool,
    site_url: str,
    today: date | None = None,
) -> str:
    """Render ``payload`` as a sitemap document.

    An absent or empty payload renders a one-entry urlset pointing at
    ``site_url``. An index is rendered as a sitemapindex unless ``flatten`` is
    set, in which case it contributes no urls because its refs are not pages.
    """
    if payload is None or len(payload) == 0:
        return _render_urlset([fallback_entry(site_url, today or datetime.now(UTC).date())])
    if isinstance(payload, IndexPayload):
        if flatten:
            return _render_urlset([])
        return _render_index(payload.refs)
    if isinstance(payload, FlatPayload):
        return _render_urlset(payload.entries)
    return _render_urlset([])


def _tag(name: str) -> str:
    return f"{{{SITEMAP_NS}}}{name}"


def _add_text(parent: etree._Element, name: str, value: str | None) -> None:
    if not value:
        return
    text = _XML_INVALID_CHARS.sub("", value)
    if text:
        etree.SubElement(parent, _tag(name)).text = text


def _render_urlset(entries: Iterable[SitemapEntry]) -> str:
    root = etree.Element(_tag("urlset"), nsmap={None: SITEMAP_NS})
    for entry in entries:
        url = etree.SubElement(root, _tag("url"))
        etree.SubElement(url, _tag("loc")).text = escape_location(entry.location)
        _add_text(url, "lastmod", entry.last_modified)
        _add_text(url, "changefreq", entry.change_frequency)
        _add_text(url, "priority", entry.priority)
    return _serialize(root)


def _render_index(refs: Iterable[SitemapIndexEntry]) -> str:
    root = etree.Element(_tag("sitemapindex"), nsmap={None: SITEMAP_NS})
    for ref in refs:
        sitemap = etree.SubElement(root, _tag("sitemap"))
        etree.SubElement(sitemap, _tag("loc")).text = escape_location(ref.location)
        _add_text(sitemap, "lastmod", ref.last_modified)
    return _serialize(root)


def _serialize(root: etree._Element) -> str:
    return XML_DECLARATION + etree.tostring(root, encoding="unicode", pretty_print=True)
