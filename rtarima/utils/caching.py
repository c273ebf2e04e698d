"""
Bounded memoization for statistics computed on whole series.

Results are keyed by a fingerprint of the argument *values* (dtype, shape and
raw bytes of every array argument), so two distinct arrays holding the same
numbers share an entry while a series that gained one observation does not.
"""

import functools
import hashlib
import logging
import numbers
import threading
from collections import OrderedDict, namedtuple
from typing import Any, Callable, Hashable, Optional, TypeVar

import numpy as np
import pandas as pd

from rtarima.core.config import get_performance_config

logger = logging.getLogger("rtarima.utils.caching")

F = TypeVar('F', bound=Callable[..., Any])

CacheInfo = namedtuple("CacheInfo", ["hits", "misses", "size", "maxsize"])

_MISSING = object()


def fingerprint(value: Any) -> Hashable:
    """Return a hashable key describing ``value`` by content."""
    if isinstance(value, pd.Series):
        value = value.to_numpy(dtype=np.float64)
    if isinstance(value, (list, tuple)) and value and all(isinstance(v, numbers.Real) for v in value):
        value = np.asarray(value, dtype=np.float64)
    if isinstance(value, np.ndarray):
        array = np.ascontiguousarray(value, dtype=np.float64)
        digest = hashlib.blake2b(array.tobytes(), digest_size=16).hexdigest()
        return ("array", array.shape, digest)
    if isinstance(value, (list, tuple)):
        return (type(value).__name__, tuple(fingerprint(v) for v in value))
    if isinstance(value, np.generic):
        return value.item()
    return value


class LRUCache:
    """Thread-safe least-recently-used cache.

    Args:
        maxsize: Maximum number of entries. ``None`` reads
            ``performance.cache_size`` from the configuration on every insertion.
    """

    def __init__(self, maxsize: Optional[int] = None) -> None:
        self._maxsize = maxsize
        self._data: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def maxsize(self) -> int:
        if self._maxsize is not None:
            return self._maxsize
        return get_performance_config().cache_size

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value for ``key`` or ``default``."""
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
                self.hits += 1
                return self._data[key]
            self.misses += 1
            return default

    def set(self, key: Hashable, value: Any) -> None:
        """Insert ``value`` for ``key``, evicting the oldest entries beyond ``maxsize``."""
        maxsize = self.maxsize
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > maxsize:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self.hits = 0
            self.misses = 0
        logger.debug("Cache cleared")

    def __len__(self) -> int:
        return len(self._data)

    def info(self) -> CacheInfo:
        return CacheInfo(self.hits, self.misses, len(self._data), self.maxsize)


def _copy_result(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.copy()
    return value


def memoize(func: F) -> F:
    """Cache ``func`` results by argument fingerprint.

    Array results are copied on the way in and out, so callers may mutate
    what they receive. The wrapper exposes ``cache_info()`` and ``cache_clear()``.
    """
    cache = LRUCache()

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        key = (
            tuple(fingerprint(a) for a in args),
            tuple(sorted((k, fingerprint(v)) for k, v in kwargs.items())),
        )
        cached = cache.get(key, _MISSING)
        if cached is not _MISSING:
            return _copy_result(cached)
        result = func(*args, **kwargs)
        cache.set(key, _copy_result(result))
        return result

    wrapper.cache_info = cache.info
    wrapper.cache_clear = cache.clear
    wrapper.cache = cache
    return wrapper
