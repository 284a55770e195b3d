"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("LINKIE_DB_PATH", "linkie_cache.duckdb")

# Logging
LOG_DIR = Path(os.getenv("LINKIE_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("LINKIE_LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LINKIE_LOG_TO_FILE", "").lower() in ("1", "true", "yes")
LOG_FILE_LEVEL = os.getenv("LINKIE_LOG_FILE_LEVEL", "DEBUG")
LOG_FILE_NAME = "linkie_{time:YYYY-MM-DD}.log"
LOG_RETENTION = os.getenv("LINKIE_LOG_RETENTION", "7 days")

# API
API_BASE_URL = "https://linkieapi.shedaniel.me"
LOCAL_API_BASE_URL = "http://localhost:6969"
USE_LOCAL_BACKEND = os.getenv("LINKIE_LOCAL_BACKEND", "").lower() in ("1", "true", "yes")
API_TIMEOUT = 60
MAX_CONCURRENT = 20

# Cache
CACHE_SCHEMA_VERSION = 1
CACHE_TTL = 24 * 60 * 60  # seconds
DURABLE_CACHE_PREFIX = "linkie-web-cache-"
OFFLINE_CACHE_PREFIX = "linkie-offline-cache-"

# Search
SEARCH_LIMIT = 100
WARM_CACHE_LIMIT = 100000
