# app/models/request.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class HelpRequest(SQLModel, table=True):
    """
    A posted ask for help, owned by its creator.

    Status lifecycle (see RequestService.update_status):
      open -> in_review -> assigned -> completed
      open -> completed, in_review -> completed
    Nothing ever moves back to open.
    """

    __tablename__ = "requests"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    title: str = Field(max_length=200)
    description: str

    category: str = Field(index=True)

    payment: float = Field(
        gt=0,
        description="Reward offered to the helper",
    )

    created_by: str = Field(
        foreign_key="users.uid",
        index=True,
    )

    # open | in_review | assigned | completed
    status: str = Field(
        default="open",
        index=True,
    )

    # Older demo rows may lack a city; seeding cleans those up.
    city: str | None = Field(default=None, index=True)
    area: str | None = None
    society: str | None = None

    # Helper picked by the owner when moving to "assigned"
    assigned_to: str | None = Field(default=None, foreign_key="users.uid")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )
