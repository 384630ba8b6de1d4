"""Shared fixtures for the API tests: fakes for Supabase and a base TestCase."""
import time
import unittest

from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import SQLModel

from app.core.config import get_settings
from app.core.identity import (
    AuthResult,
    AuthTokens,
    Identity,
    IdentityError,
    OAuthRedirect,
    get_identity_provider,
)
from app.core.storage_utils import get_storage
from app.database import engine
from app.main import app


def make_token(uid: str, email: str | None = None, name: str | None = None, photo: str | None = None) -> str:
    settings = get_settings()
    metadata = {}
    if name:
        metadata["full_name"] = name
    if photo:
        metadata["avatar_url"] = photo
    claims = {
        "sub": uid,
        "email": email or f"{uid}@example.com",
        "user_metadata": metadata,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG)


class FakeIdentityProvider:
    """In-memory stand-in for Supabase Auth."""

    def __init__(self):
        self.accounts: dict[str, dict] = {}
        self.redirect_codes: dict[str, Identity] = {}
        # code -> verifier of the redirect that produced it
        self.code_verifiers: dict[str, str] = {}
        self.issued_verifiers: list[str] = []
        self.linked_passwords: dict[str, str] = {}
        self.signed_out: list[str] = []

    def _result(self, identity: Identity) -> AuthResult:
        tokens = AuthTokens(
            access_token=make_token(identity.uid, identity.email, identity.display_name),
            refresh_token=f"refresh-{identity.uid}",
            expires_in=3600,
        )
        return AuthResult(identity=identity, tokens=tokens)

    def sign_up(self, email, password, name=None):
        if email in self.accounts:
            raise IdentityError("User already registered", code="user_already_exists", status=422)
        uid = f"uid-{len(self.accounts) + 1}"
        self.accounts[email] = {"uid": uid, "password": password, "name": name}
        return self._result(Identity(uid=uid, email=email, display_name=name))

    def sign_in(self, email, password):
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise IdentityError("Invalid login credentials", code="invalid_credentials", status=400)
        return self._result(Identity(uid=account["uid"], email=email, display_name=account["name"]))

    def google_redirect_url(self, redirect_to=None):
        verifier = f"verifier-{len(self.issued_verifiers) + 1}"
        self.issued_verifiers.append(verifier)
        return OAuthRedirect(
            url=f"https://accounts.google.test/o/oauth2/auth?redirect_to={redirect_to or ''}",
            code_verifier=verifier,
        )

    def exchange_redirect_code(self, code, code_verifier=None):
        identity = self.redirect_codes.get(code)
        if identity is None:
            raise IdentityError("invalid flow state, no valid flow state found", code="flow_state_not_found", status=404)
        expected = self.code_verifiers.get(code)
        if expected is not None and expected != code_verifier:
            raise IdentityError(
                "code challenge does not match previously saved code verifier",
                code="bad_code_verifier",
                status=400,
            )
        return self._result(identity)

    def link_password(self, uid, password):
        self.linked_passwords[uid] = password

    def sign_out(self, access_token):
        self.signed_out.append(access_token)


class FakeStorage:
    """In-memory stand-in for the Supabase Storage bucket."""

    base_url = "https://assistix-test.supabase.co/storage/v1/object/public/assets"

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}

    def upload(self, path, file_bytes, content_type):
        self.objects[path] = (file_bytes, content_type)
        return f"{self.base_url}/{path}"


class ApiTestCase(unittest.TestCase):
    """Fresh in-memory database and faked Supabase services per test."""

    def setUp(self):
        SQLModel.metadata.drop_all(engine)
        SQLModel.metadata.create_all(engine)

        self.identity = FakeIdentityProvider()
        self.storage = FakeStorage()
        app.dependency_overrides[get_identity_provider] = lambda: self.identity
        app.dependency_overrides[get_storage] = lambda: self.storage
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    # ----- helpers -----

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def onboard(self, uid: str, name: str | None = None, city: str = "bilaspur_cg") -> str:
        """Provision and complete a profile; returns the user's token."""
        token = make_token(uid, name=name)
        response = self.client.post(
            "/api/v1/users/me/complete",
            json={"name": name or uid.title(), "active_city": city},
            headers=self.auth(token),
        )
        self.assertEqual(response.status_code, 200, response.text)
        return token

    def post_request(self, token: str, **overrides) -> dict:
        payload = {
            "title": "Need help moving a sofa",
            "description": "Two people needed for an hour on Sunday.",
            "category": "Moving",
            "payment": 300,
        }
        payload.update(overrides)
        response = self.client.post("/api/v1/requests", json=payload, headers=self.auth(token))
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def pitch(self, token: str, request_id: str, text: str = "I can help with this.", skills=None):
        return self.client.post(
            f"/api/v1/requests/{request_id}/pitches",
            json={"pitch_text": text, "skills": skills or []},
            headers=self.auth(token),
        )
