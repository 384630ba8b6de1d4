# app/schemas/request.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.core.catalog import CATEGORIES

RequestStatus = Literal["open", "in_review", "assigned", "completed"]


class RequestCreate(SQLModel):
    """
    Payload for posting a request.

    User provides:
      - title, description, category, payment
      - optional area / society inside their city

    Backend derives:
      - created_by from token
      - city from the owner's active city
      - status = 'open'
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(max_length=200)
    description: str
    category: str
    payment: float = Field(gt=0)
    area: str | None = None
    society: str | None = None

    @field_validator("title", "description")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        if v not in CATEGORIES:
            raise ValueError(f"unknown category: {v}")
        return v

    @field_validator("area", "society")
    @classmethod
    def normalize_location(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RequestRead(SQLModel):
    """Request as listed to clients, with creator display data."""

    id: uuid.UUID
    title: str
    description: str
    category: str
    payment: float
    created_by: str
    status: RequestStatus
    city: str | None
    city_name: str | None = None
    area: str | None
    society: str | None
    assigned_to: str | None
    created_at: datetime
    creator_name: str = "Unknown User"
    creator_photo: str = ""


class RequestStatusUpdate(SQLModel):
    """
    Owner payload to move a request forward.

    helper_id is required when moving to 'assigned' and must belong to
    a helper who pitched on the request.
    """

    model_config = ConfigDict(extra="forbid")

    status: RequestStatus
    helper_id: str | None = None
