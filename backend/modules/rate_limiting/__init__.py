"""
Rate limiting module.

Process-local, fixed-window attempt counting used to dampen abuse of the
authentication endpoints.

Public API:
- IRateLimiter: Interface for rate limiting operations
- RateLimiter: In-memory implementation with an injectable clock
- RateLimitPolicy / RateLimitRecord: Models
- RateLimitExceededError: Raised by callers when allow() denies
"""

from .interfaces import IRateLimiter
from .models import RateLimitPolicy, RateLimitRecord
from .service import RateLimiter
from .exceptions import RateLimitExceededError

__all__ = [
    # Interface
    "IRateLimiter",
    # Implementation
    "RateLimiter",
    # Models
    "RateLimitPolicy",
    "RateLimitRecord",
    # Exceptions
    "RateLimitExceededError",
]
