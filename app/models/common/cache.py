"""Cache entry table - key/value medium shared by all cache layers."""

CACHE_DDL = """
CREATE TABLE IF NOT EXISTS cache_entry (
    key VARCHAR PRIMARY KEY,
    value VARCHAR NOT NULL,
    updated_at TIMESTAMP NOT NULL
)
"""
