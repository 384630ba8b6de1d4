# app/schemas/auth.py
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.user import UserRead

BootstrapState = Literal["unresolved", "redirect-pending", "observer-fired", "reconciled"]


class SignInPayload(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class SignUpPayload(SQLModel):
    """
    E-mail/password registration.

    The name becomes the profile display name.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(max_length=100)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class LinkPasswordPayload(SQLModel):
    model_config = ConfigDict(extra="forbid")

    password: str = Field(min_length=6)


class BootstrapPayload(SQLModel):
    """
    Sent by the client when it (re)loads.

    `code` is the OAuth redirect code when the client just came back from
    the Google redirect, otherwise omitted. `code_verifier` is the value
    GET /auth/google returned when that redirect started.
    """

    model_config = ConfigDict(extra="forbid")

    code: str | None = None
    code_verifier: str | None = None


class TokensRead(SQLModel):
    access_token: str
    refresh_token: str
    expires_in: int | None = None


class OAuthUrlRead(SQLModel):
    """Provider URL plus the PKCE verifier the client keeps until the redirect returns."""

    url: str
    code_verifier: str | None = None


class SessionRead(SQLModel):
    """
    Result of sign-in, sign-up and bootstrap.

    - is_new: a profile row was created by this call
    - needs_onboarding: profile is new or has no active city yet
    """

    state: BootstrapState = "reconciled"
    user: UserRead | None
    tokens: TokensRead | None = None
    is_new: bool = False
    needs_onboarding: bool = False
