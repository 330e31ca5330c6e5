"""LRU in-memory album cover cache, keyed by album UID."""

import logging
import threading
from collections import OrderedDict
from pathlib import Path

logger = logging.getLogger(__name__)


class CoverCache:
    """Maps an album UID to the file its cover image is rendered from.

    Entries go stale when album membership changes, so add/remove operations
    call ``invalidate`` and the next cover request resolves it again.
    """

    def __init__(self, max_size: int = 1000):
        self._cache: OrderedDict[str, Path] = OrderedDict()
        self._max_size = max_size
        self._lock = threading.Lock()

    def get(self, album_uid: str) -> Path | None:
        with self._lock:
            if album_uid in self._cache:
                self._cache.move_to_end(album_uid)
                return self._cache[album_uid]
            return None

    def put(self, album_uid: str, path: Path) -> None:
        with self._lock:
            if album_uid in self._cache:
                self._cache.move_to_end(album_uid)
            elif len(self._cache) >= self._max_size:
                self._cache.popitem(last=False)  # evict oldest
            self._cache[album_uid] = path

    def invalidate(self, album_uid: str) -> None:
        with self._lock:
            removed = self._cache.pop(album_uid, None)
        if removed is not None:
            logger.debug("album: removed cover of %s from cache", album_uid)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)


cover_cache = CoverCache()
