# app/services/user_service.py
import logging

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.identity import Identity
from app.core.storage_utils import SupabaseStorage, profile_image_path
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import ProfileComplete, UserUpdate

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB

ALLOWED_IMAGE_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}


class UserService:
    """
    Business logic for user profiles.

    Responsibilities:
      - lazy, idempotent profile creation on first authentication
      - onboarding (name + active city) and profile edits
      - profile image upload to the fixed per-user storage key
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Provisioning -----

    def ensure_profile(
        self,
        session: Session,
        identity: Identity,
        name: str | None = None,
        has_password: bool | None = None,
    ) -> tuple[User, bool]:
        """
        Return the profile for `identity`, creating it if absent.

        Existence check then insert: two first sign-ins for the same uid
        racing each other can both see "absent".

        Returns:
            (profile, created)
        """
        user = self.repo.get_by_id(session, identity.uid)
        if user is not None:
            return user, False

        user = User(
            uid=identity.uid,
            name=name or identity.display_name or "Anonymous User",
            email=identity.email or "",
            photo_url=identity.photo_url or "",
            skills=[],
            helps_given=0,
            has_password=has_password,
        )
        user = self.repo.create(session, user)
        logger.info("Created profile for %s", user.uid)
        return user, True

    @staticmethod
    def needs_onboarding(user: User, created: bool) -> bool:
        """A profile is incomplete when it is brand new or has no city."""
        return created or not user.active_city

    def mark_password_linked(self, session: Session, user: User) -> User:
        user.has_password = True
        return self.repo.update(session, user)

    # ----- Self profile -----

    def complete_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileComplete,
    ) -> User:
        """First-time onboarding: set display name and active city."""
        current_user.name = payload.name
        current_user.active_city = payload.active_city
        return self.repo.update(session, current_user)

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """Partial update for profile edits."""
        if payload.name is not None:
            current_user.name = payload.name

        if payload.skills is not None:
            current_user.skills = list(payload.skills)

        if payload.active_city is not None:
            current_user.active_city = payload.active_city

        return self.repo.update(session, current_user)

    def upload_photo(
        self,
        session: Session,
        storage: SupabaseStorage,
        current_user: User,
        content_type: str,
        file_bytes: bytes,
    ) -> User:
        """
        Store the image at profiles/<uid>.jpg (overwriting any previous
        one) and save its public URL on the profile.
        """
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        url = storage.upload(
            profile_image_path(current_user.uid),
            file_bytes,
            content_type,
        )
        current_user.photo_url = url
        return self.repo.update(session, current_user)
