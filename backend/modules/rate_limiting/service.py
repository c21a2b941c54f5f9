"""
Rate limiter implementation.

Fixed-window counting: each key gets a window that starts at its first
attempt; once the window is older than the configured length the next
attempt starts a fresh one. Bursts straddling a window boundary can get up
to twice the budget through; that is accepted for abuse dampening.

State lives only in this process and is lost on restart.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from shared.clock import Clock, utc_now

from .interfaces import IRateLimiter
from .models import RateLimitRecord

logger = logging.getLogger(__name__)


class RateLimiter(IRateLimiter):
    """
    In-memory rate limiter.

    Safe to share between threads: every read-modify-write of the record map
    happens under one lock. Records whose window has passed are swept every
    `sweep_every` calls to allow(), so keys that are never retried don't
    accumulate.
    """

    def __init__(self, clock: Optional[Clock] = None, sweep_every: int = 1024):
        """
        Initialize the limiter.

        Args:
            clock: Time source. Defaults to the UTC wall clock.
            sweep_every: Number of allow() calls between expired-record sweeps.
        """
        self._clock = clock or utc_now
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()
        self._sweep_every = sweep_every
        self._calls = 0

    def allow(self, key: str, max_attempts: int, window: timedelta) -> bool:
        now = self._clock()
        with self._lock:
            self._calls += 1
            if self._calls >= self._sweep_every:
                self._sweep(now)

            record = self._records.get(key)

            if record is None or now - record.window_start > window:
                self._records[key] = RateLimitRecord(count=1, window_start=now, window=window)
                return True

            if record.count >= max_attempts:
                logger.debug("Rate limit reached for %s (%d attempts)", key, record.count)
                return False

            record.count += 1
            return True

    def reset(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def peek(self, key: str) -> Optional[RateLimitRecord]:
        """Return a copy of the current record for `key`, if any."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            return RateLimitRecord(count=record.count, window_start=record.window_start, window=record.window)

    def size(self) -> int:
        """Number of keys currently tracked."""
        with self._lock:
            return len(self._records)

    def _sweep(self, now: datetime) -> None:
        # Caller holds the lock.
        stale = [key for key, record in self._records.items() if record.expired(now)]
        for key in stale:
            del self._records[key]
        self._calls = 0
        if stale:
            logger.debug("Dropped %d expired rate limit records", len(stale))
