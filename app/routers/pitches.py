# app/routers/pitches.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.routers.deps import pitch_service as service

router = APIRouter(prefix="/pitches", tags=["Pitches"])


@router.delete("/{pitch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pitch(
    pitch_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Withdraw a pitch (only the helper who submitted it)."""
    service.delete_pitch(session, current_user, pitch_id)
    return None
