"""
Thread-safe film cache with LRU eviction and optional disk persistence.

Provides:
- In-memory LRU bounded by entry count
- TTL enforcement on read
- Optional write-through to a directory of JSON files
  (atomic temp file + rename, hash-sharded sub-directories)
"""

import copy
import hashlib
import json
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from constants import DEFAULT_CACHE_TTL, MAX_CACHE_ENTRIES
from errors import NotFoundError
from metrics import metrics

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached film record and when it was fetched."""
    film_id: str
    film: Dict[str, Any]
    fetched_at: str = ""  # ISO format timestamp

    def is_expired(self, ttl: Optional[float]) -> bool:
        """
        Check if this entry is older than `ttl` seconds.

        A missing or invalid timestamp counts as expired, a naive one as UTC;
        ttl=None never expires.
        """
        if ttl is None:
            return False
        try:
            fetched = datetime.fromisoformat(self.fetched_at.replace('Z', '+00:00'))
        except (ValueError, AttributeError):
            return True
        if fetched.tzinfo is None:
            fetched = fetched.replace(tzinfo=timezone.utc)
        return (datetime.now(timezone.utc) - fetched).total_seconds() > ttl

    def copy(self) -> "CacheEntry":
        return CacheEntry(self.film_id, copy.deepcopy(self.film), self.fetched_at)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        return cls(
            film_id=data["film_id"],
            film=data["film"],
            fetched_at=data.get("fetched_at", ""),
        )


class FilmCache:
    """
    Film record cache keyed by film identifier.

    Usage:
        cache = FilmCache("./cache")
        entry = cache.read("tt0133093")
        if entry is None:
            cache.add("tt0133093", record)

    `has` followed by `get` mirrors the classic lookup pattern; `read`
    does both under one lock acquisition.
    """

    def __init__(
        self,
        cache_dir: str = None,
        max_entries: int = MAX_CACHE_ENTRIES,
        ttl: Optional[float] = DEFAULT_CACHE_TTL,
    ):
        """
        Initialize the cache.

        Args:
            cache_dir: Directory for persisted entries; memory only if None
            max_entries: LRU capacity
            ttl: Entry lifetime in seconds; None disables expiry
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.max_entries = max_entries
        self.ttl = ttl
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._cache_dir = Path(cache_dir) if cache_dir else None

        if self._cache_dir:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            self._load_persisted()

    # -------------------------------------------------------------------------
    # Disk storage
    # -------------------------------------------------------------------------

    def _get_cache_path(self, key: str) -> Path:
        """
        Get cache file path for a key.

        Uses hash-based directory sharding; the file name keeps a sanitized,
        readable copy of the key.
        """
        key_hash = hashlib.sha256(key.encode()).hexdigest()
        safe_key = "".join(
            c if c.isalnum() or c in '-_' else '_'
            for c in key
        )[:80]
        return self._cache_dir / key_hash[:2] / f"{safe_key}_{key_hash[:12]}.json"

    def _load_persisted(self) -> None:
        """Load persisted entries, oldest first, so recency survives restarts."""
        files = []
        for shard in self._cache_dir.iterdir():
            if shard.is_dir() and len(shard.name) == 2:
                files.extend(shard.glob("*.json"))

        loaded = 0
        for cache_file in sorted(files, key=lambda p: p.stat().st_mtime):
            try:
                entry = CacheEntry.from_dict(json.loads(cache_file.read_text(encoding='utf-8')))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"Invalid cache file {cache_file.name}: {e}")
                cache_file.unlink(missing_ok=True)
                continue
            if entry.is_expired(self.ttl):
                cache_file.unlink(missing_ok=True)
                continue
            self._entries[entry.film_id] = entry
            loaded += 1

        while len(self._entries) > self.max_entries:
            self._evict_oldest()

        if loaded:
            logger.info(f"Loaded {len(self._entries)} cached films from {self._cache_dir}")

    def _write_file(self, entry: CacheEntry) -> None:
        cache_path = self._get_cache_path(entry.film_id)
        temp_path = cache_path.with_suffix('.tmp')
        try:
            cache_path.parent.mkdir(exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(entry.to_dict(), f, ensure_ascii=False, indent=2)
            temp_path.replace(cache_path)
        except OSError as e:
            # The in-memory entry is still valid
            logger.warning(f"Cache write error for {entry.film_id}: {e}")
            temp_path.unlink(missing_ok=True)

    def _delete_file(self, key: str) -> None:
        if not self._cache_dir:
            return
        try:
            self._get_cache_path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Cache delete error for {key}: {e}")

    # -------------------------------------------------------------------------
    # Eviction
    # -------------------------------------------------------------------------

    def _evict_oldest(self) -> None:
        key, _ = self._entries.popitem(last=False)
        self._delete_file(key)
        metrics.inc("cache_evictions")
        logger.debug(f"Evicted cache entry {key}")

    def _drop(self, key: str) -> None:
        self._entries.pop(key, None)
        self._delete_file(key)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def read(self, key: str) -> Optional[CacheEntry]:
        """
        Read entry from cache.

        Args:
            key: Film identifier

        Returns:
            A copy of the entry if present and not expired, None otherwise
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired(self.ttl):
                logger.debug(f"Cache entry expired: {key}")
                self._drop(key)
                return None

            self._entries.move_to_end(key)
            return entry.copy()

    def has(self, key: str) -> bool:
        """Check whether a live entry exists for `key`."""
        return self.read(key) is not None

    def get(self, key: str) -> CacheEntry:
        """
        Get an entry that is known to exist.

        Raises:
            NotFoundError: No live entry for `key`
        """
        entry = self.read(key)
        if entry is None:
            raise NotFoundError(key)
        return entry

    def add(self, key: str, film: Dict[str, Any]) -> CacheEntry:
        """
        Store a film record, evicting the least recently used entry if full.

        Args:
            key: Film identifier
            film: Film record (copied on the way in)

        Returns:
            The stored entry (a copy)
        """
        entry = CacheEntry(
            film_id=key,
            film=copy.deepcopy(film),
            fetched_at=datetime.now(timezone.utc).isoformat(),
        )

        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._evict_oldest()

            if self._cache_dir:
                self._write_file(entry)

        return entry.copy()

    def delete(self, key: str) -> bool:
        """
        Delete a specific cache entry.

        Returns:
            True if entry was deleted
        """
        with self._lock:
            if key not in self._entries:
                return False
            self._drop(key)
            return True

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries deleted
        """
        with self._lock:
            keys = list(self._entries)
            for key in keys:
                self._drop(key)
            return len(keys)

    def keys(self) -> List[str]:
        """Cached film identifiers, least recently used first."""
        with self._lock:
            return list(self._entries)

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with cache stats
        """
        with self._lock:
            expired = sum(1 for e in self._entries.values() if e.is_expired(self.ttl))
            return {
                "total_entries": len(self._entries),
                "expired_entries": expired,
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl,
                "persistent": self._cache_dir is not None,
                "cache_dir": str(self._cache_dir) if self._cache_dir else None,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
