# app/schemas/pitch.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.user import normalize_skills


class PitchCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    pitch_text: str = Field(max_length=2000)
    skills: list[str] = []

    @field_validator("pitch_text")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("pitch cannot be empty")
        return v

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        return normalize_skills(v)


class PitchRead(SQLModel):
    """Pitch as shown to the request owner, with helper display data."""

    id: uuid.UUID
    request_id: uuid.UUID
    helper_id: str
    pitch_text: str
    skills: list[str]
    created_at: datetime
    helper_name: str = "Unknown User"
    helper_photo: str = ""


class MyPitchRead(SQLModel):
    """Pitch as shown to its helper, with the title of the request."""

    id: uuid.UUID
    request_id: uuid.UUID
    helper_id: str
    pitch_text: str
    skills: list[str]
    created_at: datetime
    request_title: str = "Unknown Request"


class PitchedRead(SQLModel):
    has_pitched: bool
