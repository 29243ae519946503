"""Cache module for infrareport.

This package provides the persistent result cache that prevents redundant
analysis calls against the rate-limited upstream service:
- models: CacheEntry, CacheStats data models and the composite key builder
- paths: Functions for getting cache file paths
- store: ResultCache with expiry, eviction and best-effort persistence
"""

# Models
from infrareport.cache.models import (
    CacheEntry,
    CacheStats,
    make_cache_key,
)

# Path utilities
from infrareport.cache.paths import (
    CACHE_FILE_NAME,
    get_cache_dir,
    get_cache_file,
)

# Store
from infrareport.cache.store import (
    DEFAULT_MAX_AGE,
    DEFAULT_MAX_ENTRIES,
    ResultCache,
)


__all__ = [
    # Models
    "CacheEntry",
    "CacheStats",
    "make_cache_key",
    # Path utilities
    "CACHE_FILE_NAME",
    "get_cache_dir",
    "get_cache_file",
    # Store
    "DEFAULT_MAX_AGE",
    "DEFAULT_MAX_ENTRIES",
    "ResultCache",
]
