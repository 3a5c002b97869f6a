"""In-process replay protection for accepted TOTP codes."""

import logging
from collections import OrderedDict
from threading import Lock
from typing import Hashable

logger = logging.getLogger(__name__)

DEFAULT_MAX_CACHE_SIZE = 500


class ReplayGuard:
    """Remember the last accepted time window per secret.

    ``check_and_record`` admits a (key, window) pair at most once. Keys are
    whatever the caller uses to identify a secret; the validator passes a
    digest of the key bytes so the guard never holds secret material.

    Size is bounded by ``capacity``. When a new key arrives and the guard is
    full, entries recorded for a window other than the one being checked are
    dropped first. If that frees nothing (every tracked secret was accepted in
    the current window) the least recently recorded entries are dropped until
    there is room again.

    All reads, writes, eviction sweeps and capacity changes run under one lock.
    """

    def __init__(self, capacity: int = DEFAULT_MAX_CACHE_SIZE) -> None:
        self._capacity = self._checked_capacity(capacity)
        self._windows: "OrderedDict[Hashable, int]" = OrderedDict()
        self._lock = Lock()

    @staticmethod
    def _checked_capacity(capacity: int) -> int:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        return capacity

    @property
    def capacity(self) -> int:
        with self._lock:
            return self._capacity

    def set_capacity(self, capacity: int) -> None:
        """Change the bound; shrinking trims the guard right away."""
        capacity = self._checked_capacity(capacity)
        with self._lock:
            self._capacity = capacity
            while len(self._windows) > capacity:
                self._windows.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._windows

    def last_window(self, key: Hashable):
        """Window last accepted for ``key``, or None."""
        with self._lock:
            return self._windows.get(key)

    def check_and_record(self, key: Hashable, window: int) -> bool:
        """
        Atomically admit ``window`` for ``key``.

        Returns:
            True  -> first time this window is seen for the key; it is recorded
            False -> the window was already accepted (replay)
        """
        with self._lock:
            previous = self._windows.get(key)
            if previous == window:
                return False

            if previous is None and len(self._windows) >= self._capacity:
                self._evict(window)

            self._windows[key] = window
            self._windows.move_to_end(key)
            return True

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()

    def _evict(self, window: int) -> None:
        # caller holds self._lock
        before = len(self._windows)
        stale = [k for k, w in self._windows.items() if w != window]
        for k in stale:
            del self._windows[k]

        while len(self._windows) >= self._capacity:
            self._windows.popitem(last=False)

        logger.debug(
            "Replay guard full (capacity=%d): evicted %d of %d entries",
            self._capacity, before - len(self._windows), before,
        )
