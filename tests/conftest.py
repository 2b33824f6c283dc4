"""Shared pytest configuration for all test levels."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from shopify_sitemap.config import StaticConfigProvider
from shopify_sitemap.storage import InMemorySitemapCache, InMemoryThrottle
from tests.test_utils.factories import AppConfigFactory
from tests.test_utils.fakes import FakeClock, RecordingSink
from tests.test_utils.helpers import read_fixture_bytes


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def memory_cache(clock: FakeClock) -> InMemorySitemapCache:
    return InMemorySitemapCache(clock=clock)


@pytest.fixture
def memory_throttle(clock: FakeClock) -> InMemoryThrottle:
    return InMemoryThrottle(clock=clock)


@pytest.fixture
def config_provider() -> StaticConfigProvider:
    return StaticConfigProvider(AppConfigFactory.build())


@pytest.fixture
def sitemap_urlset() -> bytes:
    return read_fixture_bytes("sitemap/urlset.xml")


@pytest.fixture
def sitemap_index() -> bytes:
    return read_fixture_bytes("sitemap/index.xml")


# Configure Hypothesis global settings
settings.register_profile(
    "dev",
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "ci",
    max_examples=100,
    deadline=5000,
)

if os.getenv("CI"):
    settings.load_profile("ci")
else:
    settings.load_profile("dev")


_LEVEL_MARKERS = {
    "unit": pytest.mark.unit,
    "integration": pytest.mark.integration,
    "e2e": pytest.mark.e2e,
}


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    root = Path(__file__).resolve().parent
    for item in items:
        try:
            rel = item.path.relative_to(root)
        except ValueError:
            continue
        for level, marker in _LEVEL_MARKERS.items():
            if rel.parts[0] == level:
                item.add_marker(marker)
                break
