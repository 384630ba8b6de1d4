# app/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.auth import (
    bearer_scheme,
    get_bearer_token,
    identity_from_token,
    require_auth,
    users,
)
from app.core.identity import IdentityError, SupabaseIdentityProvider, get_identity_provider
from app.database import get_session
from app.models.user import User
from app.schemas.auth import (
    BootstrapPayload,
    LinkPasswordPayload,
    OAuthUrlRead,
    SessionRead,
    SignInPayload,
    SignUpPayload,
)
from app.schemas.user import UserRead
from app.services.auth_service import AuthBootstrap, session_from_result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _provider_failure(exc: IdentityError) -> HTTPException:
    """
    Surface an identity provider error with its own code/message.

    Provider 4xx statuses pass through; anything else becomes 400.
    """
    code = exc.status if exc.status and 400 <= exc.status < 500 else status.HTTP_400_BAD_REQUEST
    return HTTPException(
        status_code=code,
        detail={"code": exc.code, "message": exc.message},
    )


@router.post("/sign-up", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpPayload,
    session: Session = Depends(get_session),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Create an e-mail/password account and its profile.

    `tokens` is null when the project requires e-mail confirmation.
    """
    try:
        result = provider.sign_up(payload.email, payload.password, payload.name)
    except IdentityError as exc:
        raise _provider_failure(exc)
    return session_from_result(session, users, result, name=payload.name)


@router.post("/sign-in", response_model=SessionRead)
def sign_in(
    payload: SignInPayload,
    session: Session = Depends(get_session),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """E-mail/password sign-in; provisions the profile if absent."""
    try:
        result = provider.sign_in(payload.email, payload.password)
    except IdentityError as exc:
        raise _provider_failure(exc)
    return session_from_result(session, users, result)


@router.get("/google", response_model=OAuthUrlRead)
def google_sign_in(
    redirect_to: str | None = None,
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Start the Google OAuth redirect.

    The client navigates to `url`; Google sends it back with a `code`
    that goes to POST /auth/bootstrap together with `code_verifier`.
    """
    try:
        redirect = provider.google_redirect_url(redirect_to)
    except IdentityError as exc:
        raise _provider_failure(exc)
    return OAuthUrlRead(url=redirect.url, code_verifier=redirect.code_verifier)


@router.post("/bootstrap", response_model=SessionRead)
def bootstrap(
    payload: BootstrapPayload,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Resolve who is signed in when the client (re)loads.

    - With `code`: the redirect result is checked first; the bearer token
      (observer) only counts if the redirect produced no user. A failed
      code exchange is reported only when there is no bearer token to
      fall back on.
    - Without `code`: the bearer token decides, no token means signed out.

    Response flags tell the client whether the profile was just created
    and whether onboarding (active city) is still needed.
    """
    boot = AuthBootstrap(session, users)

    if payload.code:
        boot.begin_redirect_check()

    observed = identity_from_token(credentials.credentials) if credentials else None
    boot.auth_state_changed(observed)

    if payload.code:
        result = None
        try:
            result = provider.exchange_redirect_code(payload.code, payload.code_verifier)
        except IdentityError as exc:
            if not boot.has_parked_identity:
                raise _provider_failure(exc)
            logger.info("Redirect code exchange failed (%s); using bearer token", exc.code)
        boot.finish_redirect_check(result)

    return boot.to_read()


@router.post("/link-password", response_model=UserRead)
def link_password(
    payload: LinkPasswordPayload,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Add a password to an account created through Google."""
    if current_user.has_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Account already has a password",
        )
    try:
        provider.link_password(current_user.uid, payload.password)
    except IdentityError as exc:
        raise _provider_failure(exc)
    return users.mark_password_linked(session, current_user)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    token: str = Depends(get_bearer_token),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Revoke the current session at the identity provider."""
    identity_from_token(token)
    try:
        provider.sign_out(token)
    except IdentityError as exc:
        raise _provider_failure(exc)
    return None
