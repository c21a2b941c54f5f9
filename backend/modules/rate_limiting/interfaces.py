"""
Rate limiting module interface.

The identity module depends on IRateLimiter, not the concrete class, so a
shared store (e.g. Redis) could replace the in-memory map later without
touching callers.
"""

from datetime import timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class IRateLimiter(Protocol):
    """Interface for attempt counting keyed by an arbitrary string."""

    def allow(self, key: str, max_attempts: int, window: timedelta) -> bool:
        """
        Record an attempt for `key` and report whether it is allowed.

        Args:
            key: Bucket key, e.g. "login_student@uwaterloo.ca"
            max_attempts: Attempts allowed per window
            window: Window length

        Returns:
            True if the attempt is allowed, False if the budget is exhausted
        """
        ...

    def reset(self, key: str) -> None:
        """Discard the record for `key` unconditionally."""
        ...
