import dataclasses
import unittest

from fastapi.testclient import TestClient

from api.main import create_app
from auth.dependencies import AuthContainer
from support import STRONG_PASSWORD, TEST_CONFIG, RecordingNotifier

MOBILE = {"X-Client-Type": "mobile"}


class ApiTestCase(unittest.TestCase):
    config = TEST_CONFIG

    def setUp(self):
        self.notifier = RecordingNotifier()
        self.container = AuthContainer(config=self.config, notifier=self.notifier)
        self.client = TestClient(create_app(self.container))
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def register_and_verify(self, email="a@x.com", password=STRONG_PASSWORD):
        response = self.client.post("/api/v1/auth/register", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 201)
        _, token = self.notifier.verification_links[-1]
        response = self.client.get(f"/api/v1/auth/verify-email/{token}", follow_redirects=False)
        self.assertEqual(response.status_code, 307)
        return token

    def mobile_login(self, email="a@x.com", password=STRONG_PASSWORD):
        response = self.client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
            headers=MOBILE,
        )
        self.assertEqual(response.status_code, 200)
        return response.json()["data"]


class TestAuthRoutes(ApiTestCase):
    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_register_returns_public_user(self):
        response = self.client.post(
            "/api/v1/auth/register",
            json={"email": "a@x.com", "password": STRONG_PASSWORD, "name": "Ada"},
        )

        self.assertEqual(response.status_code, 201)
        user = response.json()["data"]["user"]
        self.assertEqual(user["email"], "a@x.com")
        self.assertFalse(user["email_verified"])
        self.assertNotIn("hashed_password", user)

    def test_register_weak_password_lists_errors(self):
        response = self.client.post(
            "/api/v1/auth/register",
            json={"email": "a@x.com", "password": "weakpassword"},
        )

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(len(body["data"]["errors"]), 3)

    def test_register_duplicate_is_conflict(self):
        self.register_and_verify()

        response = self.client.post(
            "/api/v1/auth/register",
            json={"email": "a@x.com", "password": STRONG_PASSWORD},
        )

        self.assertEqual(response.status_code, 409)

    def test_verify_email_redirects(self):
        token = self.register_and_verify()

        response = self.client.get(f"/api/v1/auth/verify-email/{token}", follow_redirects=False)

        self.assertEqual(response.status_code, 307)
        self.assertEqual(response.headers["location"], f"{self.config.WEB_URL}/login?verified=false")

    def test_login_requires_verified_email(self):
        self.client.post("/api/v1/auth/register", json={"email": "a@x.com", "password": STRONG_PASSWORD})

        response = self.client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": STRONG_PASSWORD})

        self.assertEqual(response.status_code, 403)

    def test_bad_credentials(self):
        self.register_and_verify()

        wrong = self.client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "Wr0ng!Pass"})
        unknown = self.client.post("/api/v1/auth/login", json={"email": "b@x.com", "password": "Wr0ng!Pass"})

        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())

    def test_web_login_sets_cookies(self):
        self.register_and_verify()

        response = self.client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": STRONG_PASSWORD})

        self.assertEqual(response.status_code, 200)
        self.assertNotIn("access_token", response.json()["data"])
        self.assertIn("access_token", response.cookies)
        self.assertIn("refresh_token", response.cookies)
        self.assertIn("httponly", response.headers["set-cookie"].lower())

        me = self.client.get("/api/v1/users/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["data"]["user"]["email"], "a@x.com")

        refreshed = self.client.post("/api/v1/auth/refresh")
        self.assertEqual(refreshed.status_code, 200)

        self.assertEqual(self.client.post("/api/v1/auth/logout").status_code, 200)

    def test_mobile_refresh_and_logout(self):
        self.register_and_verify()
        tokens = self.mobile_login()

        refreshed = self.client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": tokens["refresh_token"]},
            headers=MOBILE,
        )
        self.assertEqual(refreshed.status_code, 200)
        self.assertIn("access_token", refreshed.json()["data"])

        logout = self.client.post("/api/v1/auth/logout", json={"refresh_token": tokens["refresh_token"]})
        self.assertEqual(logout.status_code, 200)

        revoked = self.client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        self.assertEqual(revoked.status_code, 401)
        self.assertEqual(revoked.json()["detail"], "Token revoked")

    def test_refresh_without_token(self):
        self.assertEqual(self.client.post("/api/v1/auth/refresh").status_code, 401)

    def test_logout_all(self):
        self.register_and_verify()
        first = self.mobile_login()
        second = self.mobile_login()

        response = self.client.post(
            "/api/v1/auth/logout-all",
            headers={"Authorization": f"Bearer {first['access_token']}"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["revoked_sessions"], 2)
        for tokens in (first, second):
            refreshed = self.client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
            self.assertEqual(refreshed.status_code, 401)

    def test_logout_all_requires_authentication(self):
        self.assertEqual(self.client.post("/api/v1/auth/logout-all").status_code, 401)

    def test_password_reset_flow(self):
        self.register_and_verify()
        tokens = self.mobile_login()

        unknown = self.client.post("/api/v1/auth/forgot-password", json={"email": "nobody@x.com"})
        known = self.client.post("/api/v1/auth/forgot-password", json={"email": "a@x.com"})
        self.assertEqual(unknown.status_code, 200)
        self.assertEqual(unknown.json(), known.json())
        _, reset_token = self.notifier.reset_links[-1]

        weak = self.client.post(
            "/api/v1/auth/reset-password",
            json={"token": reset_token, "new_password": "weakpassword"},
        )
        self.assertEqual(weak.status_code, 400)

        reset = self.client.post(
            "/api/v1/auth/reset-password",
            json={"token": reset_token, "new_password": "N3w!Passw0rd"},
        )
        self.assertEqual(reset.status_code, 200)

        reused = self.client.post(
            "/api/v1/auth/reset-password",
            json={"token": reset_token, "new_password": "N3w!Passw0rd"},
        )
        self.assertEqual(reused.status_code, 401)
        refreshed = self.client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        self.assertEqual(refreshed.status_code, 401)
        self.mobile_login(password="N3w!Passw0rd")


class TestUserRoutes(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register_and_verify()
        self.tokens = self.mobile_login()
        self.auth = {"Authorization": f"Bearer {self.tokens['access_token']}"}

    def test_me_requires_token(self):
        self.assertEqual(self.client.get("/api/v1/users/me").status_code, 401)
        bad = self.client.get("/api/v1/users/me", headers={"Authorization": "Bearer nope"})
        self.assertEqual(bad.status_code, 401)

    def test_update_me(self):
        response = self.client.put("/api/v1/users/me", json={"name": "Grace"}, headers=self.auth)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["user"]["name"], "Grace")

    def test_sessions_hide_token_values(self):
        response = self.client.get("/api/v1/users/sessions", headers=self.auth)

        sessions = response.json()["data"]["sessions"]
        self.assertEqual(len(sessions), 1)
        self.assertNotIn("token", sessions[0])

    def test_revoke_session(self):
        session_id = self.client.get("/api/v1/users/sessions", headers=self.auth).json()["data"]["sessions"][0]["id"]

        response = self.client.delete(f"/api/v1/users/sessions/{session_id}", headers=self.auth)
        missing = self.client.delete("/api/v1/users/sessions/missing", headers=self.auth)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(missing.status_code, 404)
        refreshed = self.client.post("/api/v1/auth/refresh", json={"refresh_token": self.tokens["refresh_token"]})
        self.assertEqual(refreshed.status_code, 401)

    def test_login_history(self):
        response = self.client.get("/api/v1/users/login-history", headers=self.auth)

        attempts = response.json()["data"]["attempts"]
        self.assertEqual([a["success"] for a in attempts], [True, False])


class TestRateLimits(ApiTestCase):
    config = dataclasses.replace(TEST_CONFIG, LOGIN_RATE_LIMIT_PER_MINUTE=2, EMAIL_RATE_LIMIT_PER_HOUR=2)

    def test_verify_email_is_rate_limited(self):
        statuses = [
            self.client.get("/api/v1/auth/verify-email/unknown-token", follow_redirects=False).status_code
            for _ in range(3)
        ]

        self.assertEqual(statuses, [307, 307, 429])

    def test_login_is_rate_limited(self):
        payload = {"email": "a@x.com", "password": STRONG_PASSWORD}
        statuses = [self.client.post("/api/v1/auth/login", json=payload).status_code for _ in range(3)]

        self.assertEqual(statuses, [401, 401, 429])


if __name__ == "__main__":
    unittest.main()
