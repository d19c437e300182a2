import os
import json
import time
import logging
from typing import Any, Callable, Optional
import hashlib

logger = logging.getLogger(__name__)


class CacheHelper:
    """File-backed key/value cache with per-entry expiry.

    The cache is an optimization, never a dependency: every failure of the
    backing directory is logged and swallowed. get() then returns None and
    writes become no-ops.
    """
    DEFAULT_CACHE_DIR = ".cache"

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        namespace: str = "",
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize cache helper with specific cache directory
        Args:
            cache_dir: Base cache directory from config, if None uses DEFAULT_CACHE_DIR
            namespace: Subdirectory for this cache instance
            clock: Returns current epoch seconds; defaults to time.time
        """
        base_dir = os.path.expanduser(cache_dir or self.DEFAULT_CACHE_DIR)
        self.cache_dir = os.path.join(base_dir, namespace) if namespace else base_dir
        self._clock = clock or time.time
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            logger.error(f"Cache directory unavailable ({self.cache_dir}): {e}")

    def _get_cache_file(self, key: str) -> str:
        """Generate cache filename from key"""
        key_hash = hashlib.md5(key.encode()).hexdigest()
        return os.path.join(self.cache_dir, f"{key_hash}.json")

    def _read_entry(self, cache_file: str) -> Optional[dict]:
        with open(cache_file, "r") as f:
            entry = json.load(f)
        if not isinstance(entry, dict) or "key" not in entry:
            raise ValueError(f"malformed cache entry {cache_file}")
        return entry

    def _is_expired(self, entry: dict) -> bool:
        expires_at = entry.get("expires_at")
        return expires_at is not None and expires_at <= self._clock()

    def get(self, key: str) -> Optional[Any]:
        """Return cached value, or None when absent, expired or unreadable."""
        try:
            cache_file = self._get_cache_file(key)
            if not os.path.exists(cache_file):
                return None

            entry = self._read_entry(cache_file)
            if entry["key"] != key:
                return None
            if self._is_expired(entry):
                # Lazy expiry: drop the stale file on read
                self._remove(cache_file)
                return None
            return entry.get("value")

        except Exception as e:
            logger.error(f"Error reading cache key {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a JSON-serializable value; no ttl means the entry never expires."""
        try:
            expires_at = self._clock() + ttl_seconds if ttl_seconds else None
            entry = {"key": key, "expires_at": expires_at, "value": value}
            payload = json.dumps(entry)

            cache_file = self._get_cache_file(key)
            tmp_file = f"{cache_file}.tmp"
            with open(tmp_file, "w") as f:
                f.write(payload)
            os.replace(tmp_file, cache_file)

        except Exception as e:
            logger.error(f"Error saving cache key {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self._remove(self._get_cache_file(key))
        except Exception as e:
            logger.error(f"Error deleting cache key {key}: {e}")

    def delete_by_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with prefix. Returns the number removed."""
        removed = 0
        try:
            names = os.listdir(self.cache_dir)
        except Exception as e:
            logger.error(f"Error listing cache directory {self.cache_dir}: {e}")
            return 0

        for name in names:
            if not name.endswith(".json"):
                continue
            cache_file = os.path.join(self.cache_dir, name)
            try:
                entry = self._read_entry(cache_file)
                if str(entry["key"]).startswith(prefix):
                    self._remove(cache_file)
                    removed += 1
            except Exception as e:
                logger.warning(f"Skipping unreadable cache file {name}: {e}")
        logger.debug(f"Cache: removed {removed} entries with prefix {prefix!r}")
        return removed

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    @staticmethod
    def _remove(cache_file: str) -> None:
        if os.path.exists(cache_file):
            os.remove(cache_file)
