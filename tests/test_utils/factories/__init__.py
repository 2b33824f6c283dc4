from tests.test_utils.factories.config import AppConfigFactory, OutputConfigFactory, SourceConfigFactory
from tests.test_utils.factories.sitemap import SAMPLE_STORE, SitemapEntryFactory, SitemapIndexEntryFactory

__all__ = [
    "SAMPLE_STORE",
    "AppConfigFactory",
    "OutputConfigFactory",
    "SitemapEntryFactory",
    "SitemapIndexEntryFactory",
    "SourceConfigFactory",
]
