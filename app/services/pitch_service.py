# app/services/pitch_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.events import REQUESTS, PITCHES, feed
from app.models.pitch import Pitch
from app.models.user import User
from app.repositories.pitch_repo import PitchRepository
from app.repositories.request_repo import RequestRepository
from app.repositories.user_repo import UserRepository
from app.schemas.pitch import MyPitchRead, PitchCreate, PitchRead
from app.services.request_service import created_at_key

# Requests in these states no longer take pitches
CLOSED_STATUSES = {"assigned", "completed"}


class DuplicatePitchError(HTTPException):
    """The helper already has a pitch on this request."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already pitched for this request",
        )


class PitchService:
    """
    Business logic for pitches.

    Responsibilities:
      - one pitch per (request, helper), checked before writing
      - open -> in_review on the parent request after a pitch lands
      - helper display data for the owner's pitch list
    """

    def __init__(
        self,
        pitch_repo: PitchRepository,
        request_repo: RequestRepository,
        user_repo: UserRepository,
    ):
        self.pitch_repo = pitch_repo
        self.request_repo = request_repo
        self.user_repo = user_repo

    def has_user_pitched(self, session: Session, request_id: uuid.UUID, uid: str) -> bool:
        return self.pitch_repo.find_for_helper(session, request_id, uid) is not None

    def submit_pitch(
        self,
        session: Session,
        helper: User,
        request_id: uuid.UUID,
        payload: PitchCreate,
    ) -> PitchRead:
        """
        Submit a pitch for a request.

        Steps:
          1. Load the request; owners cannot pitch on their own request and
             assigned/completed requests are closed.
          2. Look for an existing pitch by this helper; if found, raise
             DuplicatePitchError.
          3. Insert the pitch.
          4. Re-read the request and move it open -> in_review.

        Steps 2-3 and step 4 are separate round-trips. Two submissions
        landing between check and write can both succeed.
        """
        request = self.request_repo.get_by_id(session, request_id)
        if not request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Request not found",
            )

        if request.created_by == helper.uid:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You cannot pitch on your own request",
            )

        if request.status in CLOSED_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This request is no longer accepting pitches",
            )

        if self.has_user_pitched(session, request_id, helper.uid):
            raise DuplicatePitchError()

        pitch = Pitch(
            request_id=request_id,
            helper_id=helper.uid,
            pitch_text=payload.pitch_text,
            skills=list(payload.skills),
        )
        pitch = self.pitch_repo.create(session, pitch)

        request = self.request_repo.get_by_id(session, request_id)
        moved = request is not None and request.status == "open"
        if moved:
            request.status = "in_review"
            self.request_repo.update(session, request)

        feed.publish(PITCHES)
        if moved:
            feed.publish(REQUESTS)

        return self.to_read(session, pitch)

    def to_read(self, session: Session, pitch: Pitch) -> PitchRead:
        helper = self.user_repo.get_by_id(session, pitch.helper_id)
        return PitchRead(
            **pitch.model_dump(),
            helper_name=(helper.name if helper and helper.name else "Unknown User"),
            helper_photo=(helper.photo_url if helper and helper.photo_url else ""),
        )

    def list_for_request(self, session: Session, request_id: uuid.UUID) -> list[PitchRead]:
        """Pitches on a request, newest first, one users lookup each."""
        return [
            self.to_read(session, p)
            for p in self.pitch_repo.list_for_request(session, request_id)
        ]

    def list_user_pitches(self, session: Session, uid: str) -> list[MyPitchRead]:
        """A helper's pitches with request titles, sorted newest first in Python."""
        pitches: list[MyPitchRead] = []
        for p in self.pitch_repo.list_for_helper(session, uid):
            request = self.request_repo.get_by_id(session, p.request_id)
            pitches.append(
                MyPitchRead(
                    **p.model_dump(),
                    request_title=request.title if request else "Unknown Request",
                )
            )
        pitches.sort(key=lambda p: created_at_key(p.created_at), reverse=True)
        return pitches

    def delete_pitch(self, session: Session, current_user: User, pitch_id: uuid.UUID) -> None:
        """Delete a pitch; only its helper may do so."""
        pitch = self.pitch_repo.get_by_id(session, pitch_id)
        if not pitch:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Pitch not found",
            )
        if pitch.helper_id != current_user.uid:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the helper who pitched can delete this pitch",
            )
        self.pitch_repo.delete(session, pitch)
        feed.publish(PITCHES)
