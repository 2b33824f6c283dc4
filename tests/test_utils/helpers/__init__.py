"""Test helpers."""

from tests.test_utils.helpers.fixture import fixture_path, read_fixture, read_fixture_bytes
from tests.test_utils.helpers.sitemap import index_xml, urlset_xml

__all__ = [
    "fixture_path",
    "index_xml",
    "read_fixture",
    "read_fixture_bytes",
    "urlset_xml",
]
