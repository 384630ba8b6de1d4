# app/services/auth_service.py
from sqlmodel import Session

from app.core.identity import AuthResult, AuthTokens, Identity
from app.models.user import User
from app.schemas.auth import SessionRead, TokensRead
from app.schemas.user import UserRead
from app.services.user_service import UserService

_NOTHING = object()


def tokens_read(tokens: AuthTokens | None) -> TokensRead | None:
    if tokens is None:
        return None
    return TokensRead(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


class AuthBootstrap:
    """
    Reconciles a redirect sign-in result with the auth-state observer.

    Two inputs arrive independently:
      - the one-shot redirect result (OAuth code exchange), and
      - the auth-state observer (whoever the bearer token says is signed in).

    States:
      unresolved -> redirect-pending | observer-fired -> reconciled

    While a redirect check is pending the observer is gated by a plain
    flag: its event is parked, and replayed only if the redirect check
    ends without a user. A redirect user always wins over a parked event.
    """

    def __init__(self, session: Session, users: UserService):
        self.session = session
        self.users = users

        self.state = "unresolved"
        self._redirect_pending = False
        self._parked = _NOTHING

        self.profile: User | None = None
        self.tokens: TokensRead | None = None
        self.is_new = False
        self.needs_onboarding = False

    @property
    def has_parked_identity(self) -> bool:
        """An observer event with a signed-in user is waiting on the redirect check."""
        return self._parked is not _NOTHING and self._parked is not None

    def begin_redirect_check(self) -> None:
        self._redirect_pending = True
        self.state = "redirect-pending"

    def finish_redirect_check(self, result: AuthResult | None) -> None:
        self._redirect_pending = False
        parked, self._parked = self._parked, _NOTHING

        if result is not None:
            self.tokens = tokens_read(result.tokens)
            self._reconcile(result.identity)
        elif parked is not _NOTHING:
            self.auth_state_changed(parked)
        else:
            self.state = "unresolved"

    def auth_state_changed(self, identity: Identity | None) -> None:
        if self._redirect_pending:
            self._parked = identity
            return

        self.state = "observer-fired"
        self._reconcile(identity)

    def _reconcile(self, identity: Identity | None) -> None:
        if identity is None:
            self.profile = None
            self.is_new = False
            self.needs_onboarding = False
        else:
            self.profile, created = self.users.ensure_profile(self.session, identity)
            self.is_new = created
            self.needs_onboarding = self.users.needs_onboarding(self.profile, created)
        self.state = "reconciled"

    def to_read(self) -> SessionRead:
        return SessionRead(
            state=self.state,
            user=UserRead.model_validate(self.profile) if self.profile else None,
            tokens=self.tokens,
            is_new=self.is_new,
            needs_onboarding=self.needs_onboarding,
        )


def session_from_result(
    session: Session,
    users: UserService,
    result: AuthResult,
    name: str | None = None,
) -> SessionRead:
    """
    Build the sign-in/sign-up response for an e-mail/password result.

    The profile is provisioned if absent; a password sign-in also
    records that the account has a password credential.
    """
    profile, created = users.ensure_profile(
        session, result.identity, name=name, has_password=True
    )
    if not profile.has_password:
        profile = users.mark_password_linked(session, profile)

    return SessionRead(
        state="reconciled",
        user=UserRead.model_validate(profile),
        tokens=tokens_read(result.tokens),
        is_new=created,
        needs_onboarding=users.needs_onboarding(profile, created),
    )
