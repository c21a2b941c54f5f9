"""
Rate limiting module exceptions.
"""

from shared.exceptions import RateLimitedError


class RateLimitExceededError(RateLimitedError):
    """Raised when an attempt budget is exhausted for a key within its window."""

    def __init__(self, action: str, message: str):
        super().__init__(
            message,
            code="RATE_LIMITED",
            details={"action": action},
        )
