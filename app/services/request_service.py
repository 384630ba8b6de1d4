# app/services/request_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.catalog import get_city_display_name
from app.core.events import REQUESTS, PITCHES, feed
from app.models.request import HelpRequest
from app.models.user import User
from app.repositories.pitch_repo import PitchRepository
from app.repositories.request_repo import RequestRepository
from app.repositories.user_repo import UserRepository
from app.schemas.request import RequestCreate, RequestRead, RequestStatusUpdate

logger = logging.getLogger(__name__)

# Forward-only status machine. Nothing returns to "open".
STATUS_TRANSITIONS: dict[str, set[str]] = {
    "open": {"in_review", "completed"},
    "in_review": {"assigned", "completed"},
    "assigned": {"completed"},
    "completed": set(),
}

# Set by the system when the first pitch arrives, never by the owner.
SYSTEM_ONLY_STATUSES = {"in_review"}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def can_transition(current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(current, set())


def created_at_key(created_at: datetime | None) -> float:
    """
    Sort key for client-side newest-first ordering.

    Missing timestamps sort as the epoch; naive datetimes are UTC.
    """
    if created_at is None:
        created_at = _EPOCH
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.timestamp()


def filter_requests(
    requests: list[RequestRead],
    q: str | None = None,
    category: str | None = None,
    status_filter: str | None = None,
) -> list[RequestRead]:
    """
    In-memory filtering applied after the full city-scoped set is loaded.

    - q: case-insensitive substring of title or description
    - category / status_filter: equality
    """
    needle = (q or "").strip().lower()
    result = []
    for r in requests:
        if needle and needle not in r.title.lower() and needle not in r.description.lower():
            continue
        if category and r.category != category:
            continue
        if status_filter and r.status != status_filter:
            continue
        result.append(r)
    return result


class RequestService:
    """
    Business logic for help requests.

    Responsibilities:
      - city-scoped listing with creator display data
      - posting requests into the owner's active city
      - owner-driven status transitions
      - cascade delete (request, then its pitches one by one)
    """

    def __init__(
        self,
        request_repo: RequestRepository,
        pitch_repo: PitchRepository,
        user_repo: UserRepository,
    ):
        self.request_repo = request_repo
        self.pitch_repo = pitch_repo
        self.user_repo = user_repo

    # -------- Read side --------

    def to_read(self, session: Session, request: HelpRequest) -> RequestRead:
        """
        Attach creator name/photo.

        One users lookup per request; listing N requests costs N lookups.
        """
        creator = self.user_repo.get_by_id(session, request.created_by)
        return RequestRead(
            **request.model_dump(),
            city_name=get_city_display_name(request.city) if request.city else None,
            creator_name=(creator.name if creator and creator.name else "Unknown User"),
            creator_photo=(creator.photo_url if creator and creator.photo_url else ""),
        )

    def load_city_requests(self, session: Session, city: str | None) -> list[RequestRead]:
        """Full, unfiltered, newest-first list for a city."""
        if not city:
            return []
        return [self.to_read(session, r) for r in self.request_repo.list_for_city(session, city)]

    def list_requests(
        self,
        session: Session,
        city: str | None,
        q: str | None = None,
        category: str | None = None,
        status_filter: str | None = None,
    ) -> list[RequestRead]:
        requests = self.load_city_requests(session, city)
        return filter_requests(requests, q=q, category=category, status_filter=status_filter)

    def list_user_requests(self, session: Session, uid: str) -> list[RequestRead]:
        """Requests posted by `uid`, sorted newest first in Python."""
        requests = [self.to_read(session, r) for r in self.request_repo.list_for_owner(session, uid)]
        requests.sort(key=lambda r: created_at_key(r.created_at), reverse=True)
        return requests

    def get_request(self, session: Session, request_id: uuid.UUID) -> HelpRequest:
        request = self.request_repo.get_by_id(session, request_id)
        if not request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Request not found",
            )
        return request

    def get_owned_request(
        self,
        session: Session,
        owner: User,
        request_id: uuid.UUID,
    ) -> HelpRequest:
        """
        Return the request if `owner` created it.

        Raises:
            HTTPException(404): request does not exist
            HTTPException(403): request belongs to someone else
        """
        request = self.get_request(session, request_id)
        if request.created_by != owner.uid:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the owner can do this",
            )
        return request

    # -------- Write side --------

    def create_request(
        self,
        session: Session,
        owner: User,
        payload: RequestCreate,
    ) -> RequestRead:
        """Post a new open request into the owner's active city."""
        if not owner.active_city:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Complete your profile (active city) before posting",
            )

        request = HelpRequest(
            title=payload.title,
            description=payload.description,
            category=payload.category,
            payment=payload.payment,
            created_by=owner.uid,
            status="open",
            city=owner.active_city,
            area=payload.area,
            society=payload.society,
        )
        request = self.request_repo.create(session, request)
        feed.publish(REQUESTS)
        return self.to_read(session, request)

    def update_status(
        self,
        session: Session,
        owner: User,
        request_id: uuid.UUID,
        payload: RequestStatusUpdate,
    ) -> RequestRead:
        """
        Owner-initiated status change:

          open      -> completed
          in_review -> assigned, completed
          assigned  -> completed
          completed -> (no change)

        Setting the current status again is a no-op. Moving to 'assigned'
        needs the uid of a helper who pitched. Completing an assigned
        request credits the helper's helps_given.
        """
        request = self.get_owned_request(session, owner, request_id)

        current = request.status
        new = payload.status

        if current == new:
            return self.to_read(session, request)

        if new in SYSTEM_ONLY_STATUSES or not can_transition(current, new):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        if new == "assigned":
            if not payload.helper_id or not self.pitch_repo.find_for_helper(
                session, request.id, payload.helper_id
            ):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Assign the request to a helper who pitched for it",
                )
            request.assigned_to = payload.helper_id

        request.status = new
        request = self.request_repo.update(session, request)

        if new == "completed" and request.assigned_to:
            self.user_repo.increment_helps_given(session, request.assigned_to)

        feed.publish(REQUESTS)
        return self.to_read(session, request)

    def delete_request(
        self,
        session: Session,
        owner: User,
        request_id: uuid.UUID,
    ) -> None:
        request = self.get_owned_request(session, owner, request_id)
        self.cascade_delete(session, request)

    def cascade_delete(self, session: Session, request: HelpRequest) -> int:
        """
        Delete the request, then every pitch referencing it, one at a time.

        Each delete commits on its own. An error part-way through leaves
        the remaining pitches orphaned; nothing retries them.

        Returns:
            Number of pitches deleted.
        """
        request_id = request.id
        self.request_repo.delete(session, request)

        deleted = 0
        for pitch in self.pitch_repo.list_for_request(session, request_id):
            self.pitch_repo.delete(session, pitch)
            deleted += 1

        feed.publish(REQUESTS)
        if deleted:
            feed.publish(PITCHES)
        logger.info("Deleted request %s and %d pitch(es)", request_id, deleted)
        return deleted
