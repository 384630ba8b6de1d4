# app/routers/users.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlmodel import Session

from app.core.auth import require_auth, users as service
from app.core.storage_utils import SupabaseStorage, get_storage
from app.database import get_session
from app.models.user import User
from app.routers.deps import pitch_service, request_service
from app.schemas.pitch import MyPitchRead
from app.schemas.request import RequestRead
from app.schemas.user import ProfileComplete, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires valid Supabase JWT (profile is created on first call).
    """
    return current_user


@router.post("/me/complete", response_model=UserRead)
def complete_profile(
    payload: ProfileComplete,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    First-time onboarding: display name and active city.

    The active city scopes which requests the user sees and posts.
    """
    return service.complete_profile(session, current_user, payload)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Partial profile update: name, skills, active city."""
    return service.update_me(session, current_user, payload)


@router.post(
    "/me/photo",
    response_model=UserRead,
    summary="Upload or replace the profile image",
)
def upload_photo(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    storage: SupabaseStorage = Depends(get_storage),
):
    """
    Upload a profile image.

    - Accepts JPEG, PNG, WEBP (max 5MB).
    - Always stored at profiles/<uid>.jpg, replacing the previous image.
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )

    file_bytes = file.file.read()
    return service.upload_photo(
        session=session,
        storage=storage,
        current_user=current_user,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )


@router.get("/me/requests", response_model=list[RequestRead])
def list_my_requests(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Requests posted by the current user, newest first."""
    return request_service.list_user_requests(session, current_user.uid)


@router.get("/me/pitches", response_model=list[MyPitchRead])
def list_my_pitches(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Pitches submitted by the current user, with request titles."""
    return pitch_service.list_user_pitches(session, current_user.uid)
