# app/core/storage_utils.py
from functools import lru_cache

from app.core.config import get_settings
from app.core.supabase_client import supabase_admin

settings = get_settings()


def profile_image_path(uid: str) -> str:
    """
    Fixed object key for a user's profile image.

    Every upload for the same user overwrites the previous one.
    Example: "profiles/<uid>.jpg"
    """
    return f"profiles/{uid}.jpg"


class SupabaseStorage:
    """
    Thin wrapper over a Supabase Storage bucket.

    The API only needs one operation: upsert bytes at a key and hand
    back the public URL.
    """

    def __init__(self, bucket: str):
        self.bucket = bucket

    def _bucket(self):
        return supabase_admin().storage.from_(self.bucket)

    def upload(self, path: str, file_bytes: bytes, content_type: str) -> str:
        """
        Upload raw bytes to Supabase Storage and return a public URL.

        If a file already exists at this path, it will be overwritten
        thanks to the 'upsert' option.

        Raises:
            Any exception raised by Supabase client if upload fails.
        """
        self._bucket().upload(
            path,
            file_bytes,
            {"upsert": "true", "content-type": content_type},
        )
        return self._bucket().get_public_url(path)


@lru_cache
def get_storage() -> SupabaseStorage:
    """FastAPI dependency returning the shared storage wrapper."""
    return SupabaseStorage(settings.STORAGE_BUCKET)
