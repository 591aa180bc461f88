"""
Version Cache
=============

Keyed load-or-fetch store used for mapping tables and XSD texts.

Entries are never invalidated implicitly; schema files are static assets.
A lock guards first-time loads so concurrent callers read each file once.
"""

import logging
import threading
from typing import Callable, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VersionCache(Generic[T]):
    """
    Thread-safe cache keyed by schema version string.

    Example:
        cache = VersionCache("xsd")
        text = cache.get_or_load("01.05", lambda v: read_xsd(v))
        cache.clear("01.05")
    """

    def __init__(self, name: str = "cache"):
        self.name = name
        self._entries: Dict[str, T] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    def get_or_load(self, key: str, loader: Callable[[str], T]) -> T:
        """
        Return the cached entry for ``key``, loading it on first access.

        Exceptions raised by ``loader`` propagate and nothing is cached.
        """
        if key in self._entries:
            logger.debug(f"[{self.name}] cache hit for {key}")
            return self._entries[key]

        with self._lock:
            if key not in self._entries:
                logger.debug(f"[{self.name}] loading {key}")
                self._entries[key] = loader(key)
            return self._entries[key]

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self, key: Optional[str] = None) -> None:
        """Drop one entry, or every entry when ``key`` is None."""
        with self._lock:
            if key is None:
                logger.info(f"[{self.name}] clearing all cached entries")
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
