# app/models/user.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile for Assistix.

    Identity:
      - uid: MUST match the Supabase auth user id (JWT "sub")

    Created lazily the first time a user authenticates. Never
    hard-deleted by the application.

    This table is *not* responsible for password hashes. Supabase Auth
    stores credentials in its own schema; `has_password` only mirrors
    whether an e-mail/password credential has been linked.
    """

    __tablename__ = "users"

    uid: str = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    name: str = Field(
        max_length=100,
        description="Display name shown on requests and pitches",
    )

    email: str = Field(
        default="",
        index=True,
        description="Email from Supabase auth.users ('' if the provider gave none)",
    )

    photo_url: str = Field(
        default="",
        description="Public URL of the profile image",
    )

    # Ordered list of free-text skills
    skills: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    helps_given: int = Field(
        default=0,
        description="Number of requests this user helped complete",
    )

    # One of app.core.catalog.ACTIVE_CITIES; None until onboarding is done
    active_city: str | None = Field(
        default=None,
        index=True,
    )

    has_password: bool | None = Field(
        default=None,
        description="True once an e-mail/password credential is linked",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
