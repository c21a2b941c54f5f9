"""
JWT Authentication middleware.

Validates Supabase JWT tokens and extracts the caller's Identity.
The verification flag in the token is only a snapshot; the ride registry
re-checks it through the identity gateway.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt

from shared.config import get_settings
from shared.models import Identity
from modules.auth.exceptions import ExpiredTokenError, InvalidTokenError, MissingTokenError
from modules.auth.models import JWTPayload

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> JWTPayload:
    """
    Decode and validate a Supabase JWT token.

    Args:
        token: The JWT token string

    Returns:
        JWTPayload with decoded claims

    Raises:
        InvalidTokenError: If the token is invalid or auth isn't configured
        ExpiredTokenError: If the token has expired
    """
    settings = get_settings()

    if not settings.supabase_jwt_secret:
        raise InvalidTokenError("Server authentication not configured")

    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
        return JWTPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise ExpiredTokenError()
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {str(e)}")


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """
    Dependency that requires authentication.

    Usage:
        @router.get("/protected")
        async def protected_route(identity: Identity = Depends(get_current_identity)):
            return {"uid": identity.uid}
    """
    if credentials is None:
        raise MissingTokenError("Missing authorization header")

    return decode_token(credentials.credentials).to_identity()
