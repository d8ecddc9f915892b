# Cache of built LUT filters
"""
Memoizes LUT cubes by filter id so a filter's reference image is parsed once.

The cache grows without bound; entries only leave through ``evict`` or
``clear``. Callers needing a memory bound should wrap it.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from lut_filter.config import settings
from ..utils.logger import get_logger
from .buffer import PixelBuffer
from .lut_cube import LutCube, LutLayout, build_lut_cube

logger = get_logger(__name__)

ReferenceSource = Union[PixelBuffer, Callable[[], PixelBuffer]]


@dataclass(frozen=True)
class FilterEntry:
    """A built filter. ``intensity`` is the default used when a call passes none."""
    filter_id: str
    cube: LutCube
    intensity: float = 1.0


class FilterCache:
    """
    Thread-safe map of filter id -> FilterEntry.

    Concurrent first requests for the same id run the builder exactly once;
    every caller gets the same FilterEntry. Builds for different ids run in
    parallel.
    """

    def __init__(self, builder: Callable[..., LutCube] = build_lut_cube):
        self._builder = builder
        self._entries: Dict[str, FilterEntry] = {}
        self._build_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, filter_id: str) -> Optional[FilterEntry]:
        with self._lock:
            return self._entries.get(filter_id)

    def __contains__(self, filter_id: str) -> bool:
        with self._lock:
            return filter_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_build(
        self,
        filter_id: str,
        reference: ReferenceSource,
        dimension: Optional[int] = None,
        layout: Union[LutLayout, str, None] = None,
        intensity: Optional[float] = None,
    ) -> FilterEntry:
        """
        Return the cached entry for ``filter_id``, building it on first use.

        Args:
            filter_id: Cache key.
            reference: LUT reference PixelBuffer, or a zero-argument callable
                returning one. The callable is only invoked when a build is needed.
            dimension: Cube edge length (defaults to the configured dimension).
            layout: LutLayout or name (defaults to the configured layout).
            intensity: Default intensity stored on a newly built entry
                (defaults to the configured intensity).

        Raises:
            Whatever the builder raises (e.g. InvalidDimensionError). Nothing
            is cached in that case and a later call retries the build.
        """
        with self._lock:
            entry = self._entries.get(filter_id)
            if entry is not None:
                return entry
            build_lock = self._build_locks.setdefault(filter_id, threading.Lock())

        with build_lock:
            # another thread may have finished the build while we waited
            with self._lock:
                entry = self._entries.get(filter_id)
            if entry is not None:
                return entry

            if dimension is None:
                dimension = settings.FILTER_DEFAULTS["lut_dimension"]
            if layout is None:
                layout = settings.FILTER_DEFAULTS["lut_layout"]
            if intensity is None:
                intensity = settings.FILTER_DEFAULTS["intensity"]

            logger.info("Building LUT filter '%s' (dimension %s, %s)", filter_id, dimension,
                        LutLayout.parse(layout).value)
            try:
                source = reference() if callable(reference) else reference
                cube = self._builder(source, dimension, layout, filter_id=filter_id)
                entry = FilterEntry(filter_id=filter_id, cube=cube, intensity=intensity)
                with self._lock:
                    self._entries[filter_id] = entry
            finally:
                with self._lock:
                    self._build_locks.pop(filter_id, None)
            return entry

    def evict(self, filter_id: str) -> bool:
        """Drop one entry. Returns True if it was cached."""
        with self._lock:
            return self._entries.pop(filter_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_default_cache = FilterCache()


def get_default_cache() -> FilterCache:
    """Process-wide cache used by get_or_build_cached_filter."""
    return _default_cache


def get_or_build_cached_filter(
    filter_id: str,
    reference: ReferenceSource,
    dimension: Optional[int] = None,
    layout: Union[LutLayout, str, None] = None,
) -> LutCube:
    """Cube for ``filter_id`` from the default cache, building it on first use."""
    return _default_cache.get_or_build(filter_id, reference, dimension, layout).cube
