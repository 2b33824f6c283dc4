from .cache import CACHE_KEY, CachedSitemap, InMemorySitemapCache, SitemapCache, SqliteSitemapCache, utc_now
from .database import IN_MEMORY, Database
from .throttle import MANUAL_UPDATE, InMemoryThrottle, SqliteThrottle, ThrottleStore

__all__ = [
    "CACHE_KEY",
    "IN_MEMORY",
    "MANUAL_UPDATE",
    "CachedSitemap",
    "Database",
    "InMemorySitemapCache",
    "InMemoryThrottle",
    "SitemapCache",
    "SqliteSitemapCache",
    "SqliteThrottle",
    "ThrottleStore",
    "utc_now",
]
