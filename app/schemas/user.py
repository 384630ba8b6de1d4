# app/schemas/user.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.core.catalog import get_city_by_id


def _normalize_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty")
    return v


def _validate_city(v: str | None) -> str | None:
    if v is None:
        return v
    if get_city_by_id(v) is None:
        raise ValueError(f"unknown city: {v}")
    return v


def normalize_skills(skills: list[str]) -> list[str]:
    """Strip skills and drop blanks and duplicates, keeping order."""
    result: list[str] = []
    for skill in skills:
        skill = skill.strip()
        if skill and skill not in result:
            result.append(skill)
    return result


class UserRead(SQLModel):
    """Profile returned to clients."""

    uid: str
    name: str
    email: str
    photo_url: str
    skills: list[str]
    helps_given: int
    active_city: str | None
    has_password: bool | None
    created_at: datetime


class ProfileComplete(SQLModel):
    """
    Onboarding payload sent right after the first sign-in.

    Both fields are mandatory: the active city decides which requests a
    user can see and post.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    active_city: str

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _normalize_name(v)

    @field_validator("active_city")
    @classmethod
    def known_city(cls, v: str) -> str:
        return _validate_city(v)


class UserUpdate(SQLModel):
    """Partial profile edit."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    skills: list[str] | None = None
    active_city: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return _normalize_name(v)

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return normalize_skills(v)

    @field_validator("active_city")
    @classmethod
    def known_city(cls, v: str | None) -> str | None:
        return _validate_city(v)
