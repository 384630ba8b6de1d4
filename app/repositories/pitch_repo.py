# app/repositories/pitch_repo.py
import uuid

from sqlmodel import Session, select

from app.models.pitch import Pitch


class PitchRepository:
    """Data access layer for pitches."""

    def get_by_id(self, session: Session, pitch_id: uuid.UUID) -> Pitch | None:
        return session.get(Pitch, pitch_id)

    def find_for_helper(
        self,
        session: Session,
        request_id: uuid.UUID,
        helper_id: str,
    ) -> Pitch | None:
        """Return the helper's pitch on a request, if any."""
        stmt = select(Pitch).where(
            Pitch.request_id == request_id,
            Pitch.helper_id == helper_id,
        )
        return session.exec(stmt).first()

    def list_for_request(self, session: Session, request_id: uuid.UUID) -> list[Pitch]:
        """Pitches on a request, newest first."""
        stmt = (
            select(Pitch)
            .where(Pitch.request_id == request_id)
            .order_by(Pitch.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_for_helper(self, session: Session, helper_id: str) -> list[Pitch]:
        """
        Pitches submitted by a user.

        Unordered on purpose; callers sort by created_at themselves.
        """
        stmt = select(Pitch).where(Pitch.helper_id == helper_id)
        return list(session.exec(stmt).all())

    def create(self, session: Session, pitch: Pitch) -> Pitch:
        session.add(pitch)
        session.commit()
        session.refresh(pitch)
        return pitch

    def delete(self, session: Session, pitch: Pitch) -> None:
        session.delete(pitch)
        session.commit()
