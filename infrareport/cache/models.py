"""Cache data models for infrareport.

Contains Pydantic models for the analysis result cache:
- CacheEntry: A single cached upstream response
- CacheStats: Summary of the cache contents for the CLI
"""

from typing import Optional

from pydantic import BaseModel

from infrareport.hashing import compute_text_hash


class CacheEntry(BaseModel):
    """A verbatim upstream response for one (content hash, request intent) pair."""

    value: str
    created_at: float  # Epoch seconds
    content_hash: str


class CacheStats(BaseModel):
    """Summary of the cache contents."""

    path: str
    entries: int
    expired: int
    max_entries: int
    max_age_seconds: float
    oldest_created_at: Optional[float] = None
    newest_created_at: Optional[float] = None


def make_cache_key(content_hash: str, request_intent: str) -> str:
    """Build the composite cache key.

    The request intent (the full prompt) is fingerprinted so that keys stay
    short while remaining unique per (content hash, intent) pair.

    Args:
        content_hash: Digest of the source image bytes.
        request_intent: The exact prompt text sent upstream.

    Returns:
        The composite key string.
    """
    return f"{content_hash}-{compute_text_hash(request_intent)}"
