"""
Created on 2026-03-04

object caches for derived DjVu metadata

@author: wf
"""

import hashlib
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from basemkit.yamlable import lod_storable

logger = logging.getLogger(__name__)


@lod_storable
class CacheEntry:
    """
    a cached value with its expiry time

    a stored None value is a hit and not a miss
    """

    value: Any = None
    # epoch seconds - None for entries that never expire
    expires: Optional[float] = None
    key: Optional[str] = None

    @classmethod
    def of_value(cls, value: Any, ttl: int, key: Optional[str] = None) -> "CacheEntry":
        expires = time.time() + ttl if ttl > 0 else None
        entry = cls(value=value, expires=expires, key=key)
        return entry

    @property
    def is_expired(self) -> bool:
        expired = self.expires is not None and self.expires <= time.time()
        return expired


class ObjectCache:
    """
    a key/value cache for JSON compatible values with a process-local mirror

    Subclasses provide the backend by implementing load, store and remove.
    """

    TTL_INDEFINITE = 0

    def __init__(self):
        # process-local mirror
        self.process_cache: Dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(*components: Any) -> str:
        """
        make a cache key from the given components
        """
        key = ":".join(str(component) for component in components)
        return key

    def load(self, key: str) -> Optional[CacheEntry]:
        """
        load the entry for the given key from the backend
        """
        raise NotImplementedError

    def store(self, key: str, entry: CacheEntry):
        """
        store the entry for the given key in the backend
        """
        raise NotImplementedError

    def remove(self, key: str):
        """
        remove the given key from the backend
        """
        raise NotImplementedError

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """
        get the unexpired entry for the given key

        Returns:
            the entry or None on a cache miss
        """
        entry = self.process_cache.get(key)
        if entry is not None and not entry.is_expired:
            return entry
        entry = self.load(key)
        if entry is None or entry.is_expired:
            return None
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.lookup(key)
        if entry is None:
            return default
        return entry.value

    def has(self, key: str) -> bool:
        return self.lookup(key) is not None

    def set(self, key: str, value: Any, ttl: int = TTL_INDEFINITE):
        self.store(key, CacheEntry.of_value(value, ttl, key=key))
        self.process_cache.pop(key, None)

    def delete(self, key: str):
        self.process_cache.pop(key, None)
        self.remove(key)

    def get_with_set_callback(
        self,
        key: str,
        ttl: int,
        callback: Callable[[], Any],
        process_ttl: Optional[int] = TTL_INDEFINITE,
    ) -> Any:
        """
        get the value for the given key computing and storing it on a miss

        Racing callers may compute the value redundantly - the last writer wins.

        Args:
            key: the cache key
            ttl: time to live in the backend, TTL_INDEFINITE for no expiry
            callback: computes the value, None marks a permanent failure
            process_ttl: time to live of the process-local mirror, None to bypass it

        Returns:
            the cached or computed value
        """
        entry = self.lookup(key)
        if entry is None:
            logger.debug("cache miss for %s", key)
            value = callback()
            self.set(key, value, ttl)
            entry = CacheEntry.of_value(value, ttl, key=key)
        if process_ttl is not None:
            self.process_cache[key] = CacheEntry.of_value(entry.value, process_ttl, key=key)
        return entry.value


class MemoryObjectCache(ObjectCache):
    """
    cache backed by a dict
    """

    def __init__(self):
        super().__init__()
        self.entries: Dict[str, CacheEntry] = {}

    def load(self, key: str) -> Optional[CacheEntry]:
        return self.entries.get(key)

    def store(self, key: str, entry: CacheEntry):
        self.entries[key] = entry

    def remove(self, key: str):
        self.entries.pop(key, None)


class JsonFileObjectCache(ObjectCache):
    """
    cache backed by one JSON file per key in a cache directory
    shared by all processes using the same directory
    """

    def __init__(self, cache_path: str):
        super().__init__()
        self.cache_dir = Path(cache_path)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def get_cache_file(self, key: str) -> Path:
        # keys may contain characters not allowed in file names
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        cache_file = self.cache_dir / f"{digest}.json"
        return cache_file

    def load(self, key: str) -> Optional[CacheEntry]:
        cache_file = self.get_cache_file(key)
        if not cache_file.exists():
            return None
        try:
            entry = CacheEntry.load_from_json_file(str(cache_file))
        except Exception as ex:
            # valid JSON of the wrong shape fails in from_dict as well
            logger.warning("unreadable cache file %s: %s", cache_file, ex)
            return None
        if not isinstance(entry, CacheEntry) or entry.key != key:
            return None
        return entry

    def store(self, key: str, entry: CacheEntry):
        cache_file = self.get_cache_file(key)
        entry.key = key
        # write to a temporary file and replace atomically
        fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
        os.close(fd)
        try:
            entry.save_to_json_file(tmp_path)
            os.replace(tmp_path, cache_file)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove(self, key: str):
        cache_file = self.get_cache_file(key)
        cache_file.unlink(missing_ok=True)
