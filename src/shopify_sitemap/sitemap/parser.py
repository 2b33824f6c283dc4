"""Sitemap classification and parsing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml import etree

from shopify_sitemap.observability.diagnostics import NULL_SINK
from shopify_sitemap.sitemap.models import (
    SITEMAP_NS,
    FlatPayload,
    IndexPayload,
    SitemapEntry,
    SitemapIndexEntry,
    SitemapKind,
    SitemapPayload,
)

if TYPE_CHECKING:
    from shopify_sitemap.observability.diagnostics import DiagnosticSink

INDEX_MARKER = b"<sitemapindex"


class SitemapParseError(Exception):
    """Base class for documents that cannot be read as a sitemap."""


class EmptyDocumentError(SitemapParseError):
    def __init__(self) -> None:
        super().__init__("sitemap document is empty")


class MalformedDocumentError(SitemapParseError):
    def __init__(self, diagnostic: str | None) -> None:
        self.diagnostic = diagnostic
        super().__init__(f"sitemap document is not well-formed: {diagnostic or 'no root element'}")


def looks_like_index(content: bytes) -> bool:
    """Cheap pre-parse check for a ``<sitemapindex`` root."""
    return INDEX_MARKER in content


def classify_and_parse(
    content: object,
    *,
    hint: SitemapKind | None = None,
    sink: DiagnosticSink = NULL_SINK,
) -> SitemapPayload:
    """Parse ``content`` into an index or flat payload.

    Recoverable markup errors are reported to ``sink`` and otherwise ignored;
    only a document without any root element is rejected. ``hint`` forces the
    index reading when the caller already detected an index document.
    """
    data = _as_bytes(content)
    root = _parse_root(data, sink)

    if hint is SitemapKind.INDEX or _is_index(root):
        return IndexPayload(refs=tuple(_read_refs(root)))
    return FlatPayload(entries=tuple(_read_entries(root)))


def _as_bytes(content: object) -> bytes:
    if isinstance(content, str):
        content = content.encode("utf-8")
    if not isinstance(content, (bytes, bytearray)) or not bytes(content).strip():
        raise EmptyDocumentError
    return bytes(content)


def _parse_root(data: bytes, sink: DiagnosticSink) -> etree._Element:
    parser = etree.XMLParser(
        recover=True,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        root = etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise MalformedDocumentError(str(exc)) from exc

    diagnostics = [f"line {entry.line}: {entry.message}" for entry in parser.error_log]
    if root is None:
        raise MalformedDocumentError(diagnostics[0] if diagnostics else None)
    if diagnostics:
        sink.debug("sitemap_markup_recovered", errors=len(diagnostics), first_error=diagnostics[0])
    return root


def _local_name(element: etree._Element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        tag = tag.split("}", 1)[1]
    return tag.rsplit(":", 1)[-1]


def _elements(root: etree._Element, name: str) -> list[etree._Element]:
    return [element for element in root.iter(etree.Element) if _local_name(element) == name]


def _is_index(root: etree._Element) -> bool:
    return _local_name(root) == "sitemapindex" or bool(_elements(root, "sitemap"))


def _first_text(parent: etree._Element, name: str) -> str | None:
    # Direct children only; extension elements such as image:loc are not fields.
    accepted = (name, f"{{{SITEMAP_NS}}}{name}")
    for element in parent.iterchildren(etree.Element):
        if element.tag in accepted:
            text = "".join(element.itertext()).strip()
            return text or None
    return None


def _read_refs(root: etree._Element) -> list[SitemapIndexEntry]:
    refs: list[SitemapIndexEntry] = []
    for element in _elements(root, "sitemap"):
        location = _first_text(element, "loc")
        if location is None:
            continue
        refs.append(SitemapIndexEntry(location=location, last_modified=_first_text(element, "lastmod")))
    return refs


def _read_entries(root: etree._Element) -> list[SitemapEntry]:
    entries: list[SitemapEntry] = []
    for element in _elements(root, "url"):
        location = _first_text(element, "loc")
        if location is None:
            continue
        entries.append(
            SitemapEntry(
                location=location,
                last_modified=_first_text(element, "lastmod"),
                change_frequency=_first_text(element, "changefreq"),
                priority=_first_text(element, "priority"),
            )
        )
    return entries
