"""Persistent result cache for upstream analysis responses.

Entries are keyed by the fingerprint of the source image plus the exact
request intent, expire after ``max_age`` seconds and are evicted oldest-first
(by creation time, not access time) once ``max_entries`` is reached. The whole
map is persisted to a single JSON file after every mutation.

Loading and persisting are best-effort: a corrupt or unreadable file is
treated as an empty cache and a failed write only logs a warning.
"""

import json
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from infrareport.cache.models import CacheEntry, CacheStats, make_cache_key

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 50
DEFAULT_MAX_AGE = 24 * 60 * 60.0  # 24 hours


class ResultCache:
    """Content-hash keyed cache with capacity eviction and time-based expiry."""

    def __init__(
        self,
        path: Path,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_age: float = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache and load any previously persisted entries.

        Args:
            path: JSON file backing the cache.
            max_entries: Maximum number of entries kept.
            max_age: Entry lifetime in seconds.
            clock: Wall-clock source returning epoch seconds.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if max_age <= 0:
            raise ValueError("max_age must be > 0")

        self.path = Path(path)
        self.max_entries = max_entries
        self.max_age = max_age
        self._clock = clock
        self._entries: dict[str, CacheEntry] = self._load()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: tuple[str, str]) -> bool:
        content_hash, request_intent = item
        return make_cache_key(content_hash, request_intent) in self._entries

    def get(self, content_hash: str, request_intent: str) -> Optional[str]:
        """Look up a cached response.

        An expired entry is removed as a side effect of the lookup.

        Args:
            content_hash: Digest of the source image bytes.
            request_intent: The exact prompt text.

        Returns:
            The cached response, or None on a miss or expiry.
        """
        key = make_cache_key(content_hash, request_intent)
        entry = self._entries.get(key)
        if entry is None:
            return None

        age = self._clock() - entry.created_at
        if age < self.max_age:
            logger.debug("Cache hit for %s (age %.0fs)", content_hash[:12], age)
            return entry.value

        logger.debug("Cache entry for %s expired (age %.0fs)", content_hash[:12], age)
        del self._entries[key]
        self._persist()
        return None

    def put(self, content_hash: str, request_intent: str, value: str) -> None:
        """Store a response, evicting the oldest entry if the cache is full.

        Args:
            content_hash: Digest of the source image bytes.
            request_intent: The exact prompt text.
            value: The verbatim upstream response.
        """
        key = make_cache_key(content_hash, request_intent)

        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest_key = min(self._entries, key=lambda k: self._entries[k].created_at)
            logger.debug("Cache full, evicting %s", oldest_key[:12])
            del self._entries[oldest_key]

        self._entries[key] = CacheEntry(
            value=value,
            created_at=self._clock(),
            content_hash=content_hash,
        )
        self._persist()

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.created_at >= self.max_age]
        for key in expired:
            del self._entries[key]
        if expired:
            self._persist()
        return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()
        self._persist()

    def stats(self) -> CacheStats:
        """Summarize the cache contents."""
        now = self._clock()
        created = [e.created_at for e in self._entries.values()]
        return CacheStats(
            path=str(self.path),
            entries=len(self._entries),
            expired=sum(1 for c in created if now - c >= self.max_age),
            max_entries=self.max_entries,
            max_age_seconds=self.max_age,
            oldest_created_at=min(created) if created else None,
            newest_created_at=max(created) if created else None,
        )

    def _load(self) -> dict[str, CacheEntry]:
        if not self.path.exists():
            return {}

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("cache root is not an object")
            return {key: CacheEntry.model_validate(data) for key, data in raw.items()}
        except (OSError, ValueError, SchemaError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("Failed to load cache from %s, starting empty: %s", self.path, e)
            return {}

    def _persist(self) -> None:
        payload = {key: entry.model_dump() for key, entry in self._entries.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload), encoding="utf-8")
        except (OSError, TypeError) as e:
            logger.warning("Failed to save cache to %s: %s", self.path, e)
