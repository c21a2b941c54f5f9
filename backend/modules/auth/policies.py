"""
Identity policies: which emails may sign up and which passwords are accepted.

Emails are matched case-insensitively: callers normalize to lowercase and the
pattern only admits lowercase local parts.
"""

import re
from typing import Optional

from shared.config import Settings

from .exceptions import InvalidDomainError, WeakPasswordError


class EmailDomainPolicy:
    """Restricts identities to one campus email domain."""

    def __init__(self, domain: str = "uwaterloo.ca"):
        self.domain = domain.lower()
        self._pattern = re.compile(rf"^[a-z0-9._%+-]+@{re.escape(self.domain)}$")

    def is_allowed(self, email: str) -> bool:
        return bool(self._pattern.match(email))

    def check(self, email: str) -> None:
        """Raise InvalidDomainError unless `email` (already normalized) is allowed."""
        if not self.is_allowed(email):
            raise InvalidDomainError(email, self.domain)


class PasswordPolicy:
    """
    Password strength rules.

    Length is always enforced. Mixed case and digit requirements are
    optional and off by default.
    """

    def __init__(
        self,
        min_length: int = 6,
        require_mixed_case: bool = False,
        require_digit: bool = False,
    ):
        self.min_length = min_length
        self.require_mixed_case = require_mixed_case
        self.require_digit = require_digit

    def violation(self, password: str) -> Optional[str]:
        """Return a message describing the first failed rule, or None."""
        if len(password) < self.min_length:
            return f"Password must be at least {self.min_length} characters long"
        if self.require_mixed_case:
            if not re.search(r"[a-z]", password):
                return "Password must contain at least one lowercase letter"
            if not re.search(r"[A-Z]", password):
                return "Password must contain at least one uppercase letter"
        if self.require_digit and not re.search(r"\d", password):
            return "Password must contain at least one number"
        return None

    def check(self, password: str) -> None:
        message = self.violation(password)
        if message:
            raise WeakPasswordError(message)


def build_policies(settings: Settings) -> tuple[EmailDomainPolicy, PasswordPolicy]:
    """Create the domain and password policies from settings."""
    return (
        EmailDomainPolicy(settings.allowed_email_domain),
        PasswordPolicy(
            min_length=settings.password_min_length,
            require_mixed_case=settings.password_require_mixed_case,
            require_digit=settings.password_require_digit,
        ),
    )
