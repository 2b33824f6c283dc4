from shopify_sitemap.sitemap.flattener import Flattener, FlattenLimitError
from shopify_sitemap.sitemap.models import (
    SITEMAP_NS,
    FlatPayload,
    IndexPayload,
    SitemapEntry,
    SitemapIndexEntry,
    SitemapKind,
    SitemapPayload,
)
from shopify_sitemap.sitemap.pages import page_count, paginate
from shopify_sitemap.sitemap.parser import (
    EmptyDocumentError,
    MalformedDocumentError,
    SitemapParseError,
    classify_and_parse,
    looks_like_index,
)
from shopify_sitemap.sitemap.renderer import render

__all__ = [
    "SITEMAP_NS",
    "EmptyDocumentError",
    "FlatPayload",
    "FlattenLimitError",
    "Flattener",
    "IndexPayload",
    "MalformedDocumentError",
    "SitemapEntry",
    "SitemapIndexEntry",
    "SitemapKind",
    "SitemapParseError",
    "SitemapPayload",
    "classify_and_parse",
    "looks_like_index",
    "page_count",
    "paginate",
    "render",
]
