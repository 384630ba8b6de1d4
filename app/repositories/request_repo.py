# app/repositories/request_repo.py
import uuid

from sqlmodel import Session, select

from app.models.request import HelpRequest


class RequestRepository:
    """
    Data access layer for help requests.

    Every write commits immediately: each call is one round-trip, there
    is no multi-step transaction around request operations.
    """

    def get_by_id(self, session: Session, request_id: uuid.UUID) -> HelpRequest | None:
        return session.get(HelpRequest, request_id)

    def list_for_city(self, session: Session, city: str) -> list[HelpRequest]:
        """All requests in a city, newest first."""
        stmt = (
            select(HelpRequest)
            .where(HelpRequest.city == city)
            .order_by(HelpRequest.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_for_owner(self, session: Session, uid: str) -> list[HelpRequest]:
        """
        All requests created by a user.

        Unordered on purpose; callers sort by created_at themselves.
        """
        stmt = select(HelpRequest).where(HelpRequest.created_by == uid)
        return list(session.exec(stmt).all())

    def list_for_owners(self, session: Session, uids: list[str]) -> list[HelpRequest]:
        stmt = select(HelpRequest).where(HelpRequest.created_by.in_(uids))
        return list(session.exec(stmt).all())

    def create(self, session: Session, request: HelpRequest) -> HelpRequest:
        session.add(request)
        session.commit()
        session.refresh(request)
        return request

    def update(self, session: Session, request: HelpRequest) -> HelpRequest:
        session.add(request)
        session.commit()
        session.refresh(request)
        return request

    def delete(self, session: Session, request: HelpRequest) -> None:
        session.delete(request)
        session.commit()
