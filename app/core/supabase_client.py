# app/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client, ClientOptions

from app.core.config import get_settings

settings = get_settings()


class AuthFlowStorage:
    """
    Per-call storage for a Supabase auth client.

    Holds whatever the SDK writes during one flow (the PKCE code verifier)
    so the caller can hand it back to the browser instead of keeping it
    on the server.
    """

    VERIFIER_SUFFIX = "-code-verifier"

    def __init__(self):
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def code_verifier(self) -> str | None:
        for key, value in self.items.items():
            if key.endswith(self.VERIFIER_SUFFIX):
                return value
        return None


def supabase_auth_client(storage: AuthFlowStorage | None = None) -> Client:
    """
    Create a throwaway anon-key client for one end-user auth call.

    The SDK keeps sessions and PKCE verifiers on the client, so end-user
    flows never share one. Sessions are neither persisted nor
    auto-refreshed; the client is dropped when the call returns.

    Note: This client still respects RLS.
    """
    options = ClientOptions(
        persist_session=False,
        auto_refresh_token=False,
        flow_type="pkce",
        storage=storage or AuthFlowStorage(),
    )
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY, options=options)


@lru_cache
def supabase_admin() -> Client:
    """
    Create a Supabase client with the service role key.

    Use cases:
      - uploading profile images
      - admin Auth operations (password linking, sign-out)

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
