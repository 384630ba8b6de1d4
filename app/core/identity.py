# app/core/identity.py
"""
Identity provider adapter (Supabase Auth).

Credentials, sessions and the Google OAuth redirect live in Supabase.
This module only translates between the Supabase SDK objects and the
small dataclasses the rest of the app works with, and turns SDK
failures into `IdentityError` carrying the provider code/message.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from supabase import AuthError

from app.core.config import get_settings
from app.core.supabase_client import AuthFlowStorage, supabase_admin, supabase_auth_client

settings = get_settings()


@dataclass
class Identity:
    """Authenticated user as reported by the identity provider."""

    uid: str
    email: str = ""
    display_name: str | None = None
    photo_url: str | None = None


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: str
    expires_in: int | None = None


@dataclass
class AuthResult:
    """
    Outcome of a sign-in style call.

    `tokens` is None when the provider created the account but did not
    open a session yet (e.g. e-mail confirmation is required).
    """

    identity: Identity
    tokens: AuthTokens | None


@dataclass
class OAuthRedirect:
    """
    Start of a Google redirect sign-in.

    The browser keeps `code_verifier` and sends it back with the
    redirect code; the server holds no per-user flow state.
    """

    url: str
    code_verifier: str | None = None


class IdentityError(Exception):
    """Error raised by the identity provider, with its code/message."""

    def __init__(self, message: str, code: str | None = None, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


def identity_from_metadata(uid: str, email: str | None, metadata: dict[str, Any] | None) -> Identity:
    """
    Build an Identity from provider user metadata.

    Google puts the display name in `full_name`/`name` and the avatar in
    `avatar_url`/`picture`; e-mail sign-up stores the name we pass in.
    """
    meta = metadata or {}
    return Identity(
        uid=uid,
        email=email or "",
        display_name=meta.get("full_name") or meta.get("name"),
        photo_url=meta.get("avatar_url") or meta.get("picture"),
    )


def identity_from_claims(claims: dict[str, Any]) -> Identity:
    """Build an Identity from decoded Supabase JWT claims."""
    return identity_from_metadata(
        claims["sub"],
        claims.get("email"),
        claims.get("user_metadata"),
    )


def _auth_result(response) -> AuthResult:
    if response.user is None:
        raise IdentityError("Identity provider returned no user", code="no_user")

    user = response.user
    identity = identity_from_metadata(user.id, user.email, user.user_metadata)

    tokens = None
    if response.session is not None:
        tokens = AuthTokens(
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            expires_in=response.session.expires_in,
        )
    return AuthResult(identity=identity, tokens=tokens)


def _provider_error(exc: AuthError) -> IdentityError:
    return IdentityError(
        exc.message,
        code=getattr(exc, "code", None),
        status=getattr(exc, "status", None),
    )


class SupabaseIdentityProvider:
    """
    Supabase Auth operations used by the API.

    End-user flows each get a fresh anon-key client; the admin client
    (service role) is needed for password linking and server-side sign-out.
    """

    def sign_up(self, email: str, password: str, name: str | None = None) -> AuthResult:
        options = {"data": {"name": name}} if name else {}
        try:
            response = supabase_auth_client().auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        except AuthError as exc:
            raise _provider_error(exc) from exc
        return _auth_result(response)

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            response = supabase_auth_client().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise _provider_error(exc) from exc
        return _auth_result(response)

    def google_redirect_url(self, redirect_to: str | None = None) -> OAuthRedirect:
        """Start the Google OAuth redirect and return the provider URL."""
        options = {}
        target = redirect_to or settings.OAUTH_REDIRECT_URL
        if target:
            options["redirect_to"] = target
        storage = AuthFlowStorage()
        try:
            response = supabase_auth_client(storage).auth.sign_in_with_oauth(
                {"provider": "google", "options": options}
            )
        except AuthError as exc:
            raise _provider_error(exc) from exc
        return OAuthRedirect(url=response.url, code_verifier=storage.code_verifier())

    def exchange_redirect_code(self, code: str, code_verifier: str | None = None) -> AuthResult:
        """Resolve the redirect result: trade the OAuth code for a session."""
        params = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier
        try:
            response = supabase_auth_client().auth.exchange_code_for_session(params)
        except AuthError as exc:
            raise _provider_error(exc) from exc
        return _auth_result(response)

    def link_password(self, uid: str, password: str) -> None:
        """Add an e-mail/password credential to an OAuth-only account."""
        try:
            supabase_admin().auth.admin.update_user_by_id(uid, {"password": password})
        except AuthError as exc:
            raise _provider_error(exc) from exc

    def sign_out(self, access_token: str) -> None:
        try:
            supabase_admin().auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise _provider_error(exc) from exc


@lru_cache
def get_identity_provider() -> SupabaseIdentityProvider:
    """FastAPI dependency returning the shared identity provider."""
    return SupabaseIdentityProvider()
