from tests.test_utils.fakes.clock import FakeClock
from tests.test_utils.fakes.fetching import FakeFetcher, FakeResolver, SlowFetcher, StaticValidator
from tests.test_utils.fakes.observability import RecordingSink

__all__ = [
    "FakeClock",
    "FakeFetcher",
    "FakeResolver",
    "RecordingSink",
    "SlowFetcher",
    "StaticValidator",
]
