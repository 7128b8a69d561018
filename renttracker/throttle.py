# throttle.py
"""Per-address login failure counter.

After ``max_failures`` failed logins an address is locked out until
``window`` has passed since its most recent failure. Every failure restarts
the timer; a successful login clears the counter.

One instance is owned by the Flask app (``app.extensions["login_throttle"]``)
and shared across requests, so all state changes happen under a lock. The
map is bounded: when it grows past ``max_entries`` the entries whose window
has expired are dropped first, then the least recently touched ones.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import timedelta

log = logging.getLogger(__name__)


@dataclass
class AttemptWindow:
    count: int
    window_start: float


class LoginThrottle:
    def __init__(self, max_failures=5, window=timedelta(minutes=15),
                 max_entries=10000, clock=time.monotonic):
        self.max_failures = max_failures
        self.window_seconds = window.total_seconds()
        self.max_entries = max_entries
        self._clock = clock
        self._entries = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        return cls(
            max_failures=config.get("LOGIN_MAX_FAILURES", 5),
            window=timedelta(minutes=config.get("LOGIN_LOCKOUT_MINUTES", 15)),
            max_entries=config.get("LOGIN_THROTTLE_MAX_ENTRIES", 10000),
        )

    # -----------------------
    # Public API
    # -----------------------
    def is_locked(self, address) -> bool:
        """True when a login attempt from ``address`` must be refused."""
        with self._lock:
            entry = self._entry(address)
            return (
                entry.count >= self.max_failures
                and self._clock() - entry.window_start < self.window_seconds
            )

    def record_failure(self, address) -> int:
        with self._lock:
            entry = self._entry(address)
            entry.count += 1
            entry.window_start = self._clock()
            if entry.count >= self.max_failures:
                log.warning("Login locked for %s after %d failures", address, entry.count)
            return entry.count

    def record_success(self, address):
        with self._lock:
            entry = self._entry(address)
            entry.count = 0
            entry.window_start = self._clock()

    def failures(self, address) -> int:
        with self._lock:
            entry = self._entries.get(address)
            return entry.count if entry else 0

    def __len__(self):
        with self._lock:
            return len(self._entries)

    # -----------------------
    # Internals (caller holds the lock)
    # -----------------------
    def _entry(self, address) -> AttemptWindow:
        entry = self._entries.get(address)
        if entry is None:
            entry = AttemptWindow(count=0, window_start=self._clock())
            self._entries[address] = entry
            self._evict()
        else:
            self._entries.move_to_end(address)
        return entry

    def _evict(self):
        if len(self._entries) <= self.max_entries:
            return

        now = self._clock()
        stale = [
            addr for addr, e in self._entries.items()
            if now - e.window_start >= self.window_seconds
        ]
        for addr in stale:
            del self._entries[addr]

        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
