# app/models/pitch.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Pitch(SQLModel, table=True):
    """
    An offer to fulfill a request.

    At most one pitch per (request_id, helper_id). This is checked by
    PitchService before inserting, not by a database constraint.

    request_id carries no foreign key: deleting a request removes the
    request row first and its pitches afterwards.
    """

    __tablename__ = "pitches"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    request_id: uuid.UUID = Field(index=True)

    helper_id: str = Field(
        foreign_key="users.uid",
        index=True,
    )

    pitch_text: str

    skills: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
