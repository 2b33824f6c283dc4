SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS sitemap_cache (
    cache_key TEXT PRIMARY KEY,
    kind TEXT NOT NULL,
    payload TEXT NOT NULL,
    stored_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS update_throttle (
    name TEXT PRIMARY KEY,
    triggered_at TEXT NOT NULL
);
"""
