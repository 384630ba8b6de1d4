import unittest

from app.core.identity import Identity
from support import ApiTestCase, make_token


class AuthApiTests(ApiTestCase):
    def test_sign_up_creates_profile_with_password_flag(self):
        response = self.client.post(
            "/api/v1/auth/sign-up",
            json={"email": "asha@example.com", "password": "secret123", "name": " Asha "},
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertTrue(body["is_new"])
        self.assertTrue(body["needs_onboarding"])
        self.assertEqual(body["user"]["name"], "Asha")
        self.assertTrue(body["user"]["has_password"])
        self.assertEqual(body["user"]["helps_given"], 0)

        me = self.client.get("/api/v1/users/me", headers=self.auth(body["tokens"]["access_token"]))
        self.assertEqual(me.json()["uid"], body["user"]["uid"])

    def test_sign_up_surfaces_provider_error(self):
        payload = {"email": "asha@example.com", "password": "secret123", "name": "Asha"}
        self.client.post("/api/v1/auth/sign-up", json=payload)
        response = self.client.post("/api/v1/auth/sign-up", json=payload)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["code"], "user_already_exists")

    def test_sign_up_rejects_short_password(self):
        response = self.client.post(
            "/api/v1/auth/sign-up",
            json={"email": "asha@example.com", "password": "123", "name": "Asha"},
        )
        self.assertEqual(response.status_code, 422)

    def test_sign_in(self):
        self.client.post(
            "/api/v1/auth/sign-up",
            json={"email": "asha@example.com", "password": "secret123", "name": "Asha"},
        )
        ok = self.client.post(
            "/api/v1/auth/sign-in",
            json={"email": "asha@example.com", "password": "secret123"},
        )
        self.assertEqual(ok.status_code, 200)
        self.assertFalse(ok.json()["is_new"])

        bad = self.client.post(
            "/api/v1/auth/sign-in",
            json={"email": "asha@example.com", "password": "wrong"},
        )
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()["detail"]["code"], "invalid_credentials")

    def test_google_redirect_url(self):
        response = self.client.get(
            "/api/v1/auth/google", params={"redirect_to": "http://localhost:5173/cb"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("redirect_to=http://localhost:5173/cb", response.json()["url"])
        self.assertEqual(response.json()["code_verifier"], "verifier-1")

    def test_overlapping_redirects_each_complete_with_their_own_verifier(self):
        first = self.client.get("/api/v1/auth/google").json()
        second = self.client.get("/api/v1/auth/google").json()
        self.assertNotEqual(first["code_verifier"], second["code_verifier"])

        self.identity.redirect_codes["code-a"] = Identity(uid="alice", email="alice@example.com")
        self.identity.code_verifiers["code-a"] = first["code_verifier"]
        self.identity.redirect_codes["code-b"] = Identity(uid="bob", email="bob@example.com")
        self.identity.code_verifiers["code-b"] = second["code_verifier"]

        alice = self.client.post(
            "/api/v1/auth/bootstrap",
            json={"code": "code-a", "code_verifier": first["code_verifier"]},
        )
        self.assertEqual(alice.status_code, 200, alice.text)
        self.assertEqual(alice.json()["user"]["uid"], "alice")

        bob = self.client.post(
            "/api/v1/auth/bootstrap",
            json={"code": "code-b", "code_verifier": second["code_verifier"]},
        )
        self.assertEqual(bob.json()["user"]["uid"], "bob")

    def test_bootstrap_rejects_mismatched_verifier(self):
        self.identity.redirect_codes["code-a"] = Identity(uid="alice")
        self.identity.code_verifiers["code-a"] = "verifier-1"
        response = self.client.post(
            "/api/v1/auth/bootstrap", json={"code": "code-a", "code_verifier": "verifier-2"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["code"], "bad_code_verifier")

    def test_bootstrap_signed_out(self):
        response = self.client.post("/api/v1/auth/bootstrap", json={})
        body = response.json()
        self.assertEqual(body["state"], "reconciled")
        self.assertIsNone(body["user"])
        self.assertFalse(body["needs_onboarding"])

    def test_bootstrap_new_user_needs_onboarding(self):
        token = make_token("user-a", name="Asha")
        body = self.client.post("/api/v1/auth/bootstrap", json={}, headers=self.auth(token)).json()
        self.assertTrue(body["is_new"])
        self.assertTrue(body["needs_onboarding"])
        self.assertEqual(body["user"]["name"], "Asha")

    def test_bootstrap_existing_user_without_city_needs_onboarding(self):
        token = make_token("user-a")
        self.client.get("/api/v1/users/me", headers=self.auth(token))
        body = self.client.post("/api/v1/auth/bootstrap", json={}, headers=self.auth(token)).json()
        self.assertFalse(body["is_new"])
        self.assertTrue(body["needs_onboarding"])

    def test_bootstrap_complete_user(self):
        token = self.onboard("user-a")
        body = self.client.post("/api/v1/auth/bootstrap", json={}, headers=self.auth(token)).json()
        self.assertFalse(body["is_new"])
        self.assertFalse(body["needs_onboarding"])

    def test_bootstrap_redirect_result_wins_over_stale_token(self):
        self.identity.redirect_codes["code-1"] = Identity(
            uid="google-uid", email="g@example.com", display_name="Gita", photo_url="https://img/g.png"
        )
        stale = make_token("someone-else")

        response = self.client.post(
            "/api/v1/auth/bootstrap", json={"code": "code-1"}, headers=self.auth(stale)
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["user"]["uid"], "google-uid")
        self.assertEqual(body["user"]["photo_url"], "https://img/g.png")
        self.assertTrue(body["is_new"])
        self.assertIsNone(body["user"]["has_password"])
        self.assertIsNotNone(body["tokens"]["access_token"])

    def test_bootstrap_bad_redirect_code(self):
        response = self.client.post("/api/v1/auth/bootstrap", json={"code": "nope"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["code"], "flow_state_not_found")

    def test_bootstrap_stale_code_falls_back_to_signed_in_user(self):
        token = self.onboard("user-a")
        response = self.client.post(
            "/api/v1/auth/bootstrap", json={"code": "stale"}, headers=self.auth(token)
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["state"], "reconciled")
        self.assertEqual(body["user"]["uid"], "user-a")
        self.assertFalse(body["is_new"])
        self.assertFalse(body["needs_onboarding"])
        self.assertIsNone(body["tokens"])

    def test_link_password(self):
        token = make_token("google-uid")
        response = self.client.post(
            "/api/v1/auth/link-password", json={"password": "secret123"}, headers=self.auth(token)
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["has_password"])
        self.assertEqual(self.identity.linked_passwords, {"google-uid": "secret123"})

        again = self.client.post(
            "/api/v1/auth/link-password", json={"password": "secret456"}, headers=self.auth(token)
        )
        self.assertEqual(again.status_code, 400)

    def test_sign_out(self):
        token = make_token("user-a")
        response = self.client.post("/api/v1/auth/sign-out", headers=self.auth(token))
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.identity.signed_out, [token])

        self.assertEqual(self.client.post("/api/v1/auth/sign-out").status_code, 401)


if __name__ == "__main__":
    unittest.main()
