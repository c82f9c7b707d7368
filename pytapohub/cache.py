"""Device directory cache.

Holds a single entry, the most recent DeviceDirectory. The entry is only
ever replaced as a whole so concurrent readers see either the old or the
new directory, never a mix.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from .const import DEFAULT_CACHE_SECONDS
from .models import DeviceDirectory

_LOGGER = logging.getLogger(__name__)


class DeviceDirectoryCache:
    """TTL-bounded store for the hub's device directory."""

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            ttl: Seconds a directory stays fresh
            clock: Monotonic time source
        """
        self._ttl = ttl
        self._clock = clock
        self._directory: DeviceDirectory | None = None

    @property
    def ttl(self) -> float:
        """Return cache lifetime in seconds."""
        return self._ttl

    @property
    def directory(self) -> DeviceDirectory | None:
        """Return the cached directory, fresh or not."""
        return self._directory

    def now(self) -> float:
        """Return the current clock reading."""
        return self._clock()

    def age(self) -> float | None:
        """Return age of the cached directory in seconds, or None."""
        if self._directory is None:
            return None
        return self._clock() - self._directory.fetched_at

    def get(self) -> DeviceDirectory | None:
        """Return the cached directory if it is younger than the TTL."""
        age = self.age()
        if age is None or age >= self._ttl:
            return None
        return self._directory

    def store(self, directory: DeviceDirectory) -> None:
        """Replace the cached directory."""
        self._directory = directory
        _LOGGER.debug("Cached %d child devices", len(directory))

    def invalidate(self) -> None:
        """Drop the cached directory."""
        self._directory = None
