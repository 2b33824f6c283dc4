from __future__ import annotations

from tests.test_utils.strategies.url import page_url_lists, page_url_strategy
from tests.test_utils.strategies.xml import sitemap_fragment_strategy

__all__ = [
    "page_url_lists",
    "page_url_strategy",
    "sitemap_fragment_strategy",
]
