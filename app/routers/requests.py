# app/routers/requests.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth, require_complete_profile
from app.database import get_session
from app.models.user import User
from app.routers.deps import pitch_service, request_service as service
from app.schemas.pitch import PitchCreate, PitchedRead, PitchRead
from app.schemas.request import RequestCreate, RequestRead, RequestStatus, RequestStatusUpdate

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.get("", response_model=list[RequestRead])
def list_requests(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    city: str | None = None,
    q: str | None = None,
    category: str | None = None,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
):
    """
    Requests in a city, newest first.

    - `city` defaults to the user's active city (empty list if unset).
    - `q`, `category`, `status` filter the loaded set in memory.
    """
    return service.list_requests(
        session,
        city or current_user.active_city,
        q=q,
        category=category,
        status_filter=status_filter,
    )


@router.post(
    "",
    response_model=RequestRead,
    status_code=status.HTTP_201_CREATED,
)
def create_request(
    payload: RequestCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_complete_profile),
):
    """
    Post a request (status 'open') in the user's active city.

    Auth:
      - Requires a completed profile.
    """
    return service.create_request(session, current_user, payload)


@router.get("/{request_id}", response_model=RequestRead)
def get_request(
    request_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.to_read(session, service.get_request(session, request_id))


@router.patch("/{request_id}/status", response_model=RequestRead)
def update_request_status(
    request_id: uuid.UUID,
    payload: RequestStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Move a request forward (owner only):

      open      -> completed

      in_review -> assigned (needs helper_id), completed

      assigned  -> completed

    """
    return service.update_status(session, current_user, request_id, payload)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(
    request_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Delete a request and all its pitches (owner only)."""
    service.delete_request(session, current_user, request_id)
    return None


# -------- Pitches on a request --------


@router.get("/{request_id}/pitches", response_model=list[PitchRead])
def list_pitches(
    request_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Pitches received on a request, newest first (owner only)."""
    service.get_owned_request(session, current_user, request_id)
    return pitch_service.list_for_request(session, request_id)


@router.post(
    "/{request_id}/pitches",
    response_model=PitchRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_pitch(
    request_id: uuid.UUID,
    payload: PitchCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Offer help on a request.

    - 409 if the user already pitched on it.
    - The request moves from 'open' to 'in_review'.
    """
    return pitch_service.submit_pitch(session, current_user, request_id, payload)


@router.get("/{request_id}/pitched", response_model=PitchedRead)
def has_pitched(
    request_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Whether the current user already pitched on this request."""
    return PitchedRead(
        has_pitched=pitch_service.has_user_pitched(session, request_id, current_user.uid)
    )
