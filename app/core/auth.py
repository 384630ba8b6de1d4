# app/core/auth.py
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.identity import Identity, identity_from_claims
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.services.user_service import UserService

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support signed-out access (bootstrap reports "no user").
bearer_scheme = HTTPBearer(auto_error=False)

users = UserService(UserRepository())


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def identity_from_token(token: str) -> Identity:
    """
    Verify a token and return the identity it carries.

    Raises:
        HTTPException(401): invalid token or no 'sub' claim.
    """
    payload = decode_access_token(token)
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub",
        )
    return identity_from_claims(payload)


def resolve_user(session: Session, token: str) -> User:
    """
    Resolve the profile for a token, provisioning it if missing.

    Shared by HTTP dependencies and WebSocket handlers.
    """
    user, _ = users.ensure_profile(session, identity_from_token(token))
    return user


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return credentials.credentials


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from a Supabase JWT.

    Flow:
      1. If no Authorization header => signed out => return None.
      2. Decode JWT => extract 'sub', 'email' and user metadata.
      3. Find the profile in users.
      4. If missing, auto-provision it (helps_given=0, no skills).

    Returns:
        User instance if authenticated, else None.

    Raises:
        HTTPException(401): if token is malformed or missing required claims.
    """
    if credentials is None:
        return None

    return resolve_user(session, credentials.credentials)


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_complete_profile(user: User = Depends(require_auth)) -> User:
    """
    Enforce finished onboarding (an active city is set).

    Raises:
        HTTPException(403): profile has no active city yet.
    """
    if not user.active_city:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Complete your profile first",
        )
    return user
