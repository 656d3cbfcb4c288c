"""On-disk HTTP response cache with a size cap and LRU eviction.

CacheControl's FileCache handles storage and HTTP semantics (ETag and
Last-Modified revalidation); this subclass only keeps the directory under a
byte budget. Recency is tracked through file mtimes, bumped on every hit.
"""

import logging
import os
import threading

from cachecontrol.caches.file_cache import FileCache

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50 * 1024 * 1024     # 50 MiB
_LOCK_SUFFIX = '.lock'


class BoundedFileCache(FileCache):
    """FileCache that evicts least-recently-used entries above ``capacity`` bytes."""

    def __init__(self, directory: str, capacity: int = DEFAULT_CAPACITY, **kwargs):
        super().__init__(directory, **kwargs)
        self.capacity = capacity
        self._evict_lock = threading.Lock()

    def get(self, key: str):
        value = super().get(key)
        if value is not None:
            self._touch(self._fn(key))
        return value

    def set(self, key: str, value: bytes, expires=None):
        super().set(key, value, expires)
        self.enforce_capacity()

    def size(self) -> int:
        return sum(size for _path, size, _mtime in self._entries())

    def enforce_capacity(self):
        """Delete oldest entries until the cache fits its capacity."""
        with self._evict_lock:
            entries = self._entries()
            total = sum(size for _path, size, _mtime in entries)
            if total <= self.capacity:
                return
            entries.sort(key=lambda e: e[2])
            evicted = 0
            for path, size, _mtime in entries:
                if total <= self.capacity:
                    break
                try:
                    os.remove(path)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.warning("Failed to evict cache entry %s: %s", path, e)
                    continue
                try:
                    os.remove(path + _LOCK_SUFFIX)
                except OSError:
                    pass
                total -= size
                evicted += 1
            logger.debug("Evicted %d cache entries, %d bytes remain", evicted, total)

    def _entries(self) -> list[tuple[str, int, float]]:
        entries = []
        for root, _dirs, files in os.walk(self.directory):
            for name in files:
                if name.endswith(_LOCK_SUFFIX):
                    continue
                path = os.path.join(root, name)
                try:
                    st = os.stat(path)
                except OSError:
                    continue    # raced with a concurrent delete
                entries.append((path, st.st_size, st.st_mtime))
        return entries

    @staticmethod
    def _touch(path: str):
        try:
            os.utime(path, None)
        except OSError:
            pass
