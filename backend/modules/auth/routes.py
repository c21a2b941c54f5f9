"""
Authentication API endpoints.

Each request gets its own IdentityGateway; only the rate limiter is shared,
so attempt budgets span requests.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_identity_gateway
from api.middleware.auth import get_current_identity
from api.models.errors import ErrorResponse
from shared.models import Identity

from .models import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    VerificationStatus,
    VerificationStatusRequest,
)
from .service import IdentityGateway

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=201,
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def signup(
    request: SignupRequest,
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> SignupResponse:
    """
    Create an account.

    The account is left signed out until the emailed link is clicked.
    """
    identity = await gateway.signup(request.email, request.password)
    return SignupResponse(uid=identity.uid, email=identity.email, state=gateway.state)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def login(
    request: LoginRequest,
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> LoginResponse:
    """Sign in a verified campus account and return its bearer token."""
    identity = await gateway.login(request.email, request.password, request.remember_me)
    return LoginResponse(
        identity=identity,
        state=gateway.state,
        access_token=gateway.access_token(),
    )


@router.post("/logout", status_code=204)
async def logout(
    identity: Identity = Depends(get_current_identity),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> None:
    """End the session. Clients discard their bearer token."""
    await gateway.logout()


@router.post("/resend-verification", status_code=202, responses={429: {"model": ErrorResponse}})
async def resend_verification(
    request: EmailRequest,
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> None:
    """Send the verification link again."""
    gateway.resume_pending(request.email)
    await gateway.resend_verification()


@router.post("/verification-status", response_model=VerificationStatus)
async def verification_status(
    request: VerificationStatusRequest,
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> VerificationStatus:
    """
    Report whether an account has verified its email.

    Clients poll this while waiting; once it reports verified, log in.
    """
    gateway.resume_pending(request.email, uid=request.uid)
    verified = await gateway.check_verification()
    return VerificationStatus(
        email=gateway.pending_email or request.email,
        email_verified=verified,
        state=gateway.state,
    )
