"""SQL store tests, run against in-memory SQLite."""

import unittest

from auth.exceptions import EmailAlreadyRegistered
from auth.services.auth_service import AuthService
from auth.stores.memory_store import MemoryEphemeralStore
from auth.stores.postgres_store import (
    PostgresLoginHistoryStore,
    PostgresSessionStore,
    PostgresUserStore,
)
from db.engine import create_db_engine, create_schema, create_session_factory
from support import STRONG_PASSWORD, TEST_CONFIG, RecordingNotifier


class SQLStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite://")
        create_schema(self.engine)
        factory = create_session_factory(self.engine)
        self.users = PostgresUserStore(factory)
        self.sessions = PostgresSessionStore(factory)
        self.history = PostgresLoginHistoryStore(factory)

    def tearDown(self):
        self.engine.dispose()

    async def _account(self, email="a@x.com"):
        return await self.users.create_user(
            {"email": email, "name": "Ada", "hashed_password": "hash", "email_verified": False}
        )


class TestPostgresUserStore(SQLStoreTestCase):
    async def test_create_and_lookup(self):
        user = await self._account()

        self.assertEqual(len(user["id"]), 36)
        self.assertIsInstance(user["created_at"], int)
        self.assertEqual((await self.users.get_by_email("a@x.com"))["id"], user["id"])
        self.assertEqual((await self.users.get_by_id(user["id"]))["email"], "a@x.com")
        self.assertIsNone(await self.users.get_by_email("A@x.com"))
        self.assertIsNone(await self.users.get_by_id("missing"))

    async def test_duplicate_email_raises(self):
        await self._account()

        with self.assertRaises(EmailAlreadyRegistered):
            await self._account()

    async def test_updates(self):
        user = await self._account()

        await self.users.mark_email_verified(user["id"])
        await self.users.update_password(user["id"], "new-hash")
        updated = await self.users.update_user(user["id"], {"name": "Grace", "email": "b@x.com"})

        self.assertTrue(updated["email_verified"])
        self.assertEqual(updated["hashed_password"], "new-hash")
        self.assertEqual(updated["name"], "Grace")
        self.assertEqual(updated["email"], "a@x.com")


class TestPostgresSessionStore(SQLStoreTestCase):
    async def test_session_lifecycle(self):
        user = await self._account()
        created = await self.sessions.create_session(user["id"], "token-a", 2000, "phone", "10.0.0.1")

        self.assertFalse(created["revoked"])
        self.assertEqual((await self.sessions.get_by_token("token-a"))["id"], created["id"])
        self.assertEqual((await self.sessions.get_by_id(created["id"]))["token"], "token-a")

        await self.sessions.revoke_session("token-a")

        self.assertTrue((await self.sessions.get_by_token("token-a"))["revoked"])
        self.assertIsNone(await self.sessions.get_by_token("missing"))

    async def test_list_active_filters_and_orders(self):
        user = await self._account()
        await self.sessions.create_session(user["id"], "expired", 500, created_at=900.0)
        await self.sessions.create_session(user["id"], "first", 2000, created_at=950.1)
        await self.sessions.create_session(user["id"], "second", 3000, created_at=950.4)
        await self.sessions.create_session(user["id"], "revoked", 2500, created_at=950.5)
        await self.sessions.create_session(user["id"], "third", 2000, created_at=950.9)
        await self.sessions.revoke_session("revoked")

        active = await self.sessions.list_active(user["id"], 1000)

        self.assertEqual([row["token"] for row in active], ["third", "second", "first"])
        self.assertEqual(active[0]["created_at"], 950)

    async def test_revoke_all_counts_only_live_rows(self):
        user = await self._account()
        other = await self._account("b@x.com")
        await self.sessions.create_session(user["id"], "a", 2000)
        await self.sessions.create_session(user["id"], "b", 2000)
        await self.sessions.create_session(user["id"], "c", 2000)
        await self.sessions.create_session(other["id"], "d", 2000)
        await self.sessions.revoke_session("c")

        self.assertEqual(await self.sessions.revoke_all_for_user(user["id"]), 2)
        self.assertEqual(await self.sessions.list_active(user["id"], 0), [])
        self.assertEqual(len(await self.sessions.list_active(other["id"], 0)), 1)


class TestPostgresLoginHistoryStore(SQLStoreTestCase):
    async def test_append_and_list(self):
        user = await self._account()
        await self.history.append_attempt({"user_id": user["id"], "ip_address": None, "success": False})
        await self.history.append_attempt({"user_id": user["id"], "ip_address": "10.0.0.1", "success": True})

        attempts = await self.history.list_attempts(user["id"])

        self.assertEqual(len(attempts), 2)
        self.assertEqual({a["ip_address"] for a in attempts}, {"unknown", "10.0.0.1"})
        self.assertEqual(len(await self.history.list_attempts(user["id"], limit=1)), 1)


class TestAuthServiceOnSQL(SQLStoreTestCase):
    def setUp(self):
        super().setUp()
        self.notifier = RecordingNotifier()
        self.service = AuthService(
            user_store=self.users,
            session_store=self.sessions,
            login_history_store=self.history,
            ephemeral_store=MemoryEphemeralStore(),
            notifier=self.notifier,
            config=TEST_CONFIG,
        )

    async def _verified_account(self):
        user = await self.service.register("a@x.com", STRONG_PASSWORD)
        await self.service.verify_email(self.notifier.verification_links[0][1])
        return user

    async def test_sessions_created_within_one_second_list_newest_first(self):
        user = await self._verified_account()
        devices = [f"d{n}" for n in range(1, 7)]
        for device in devices:
            await self.service.login("a@x.com", STRONG_PASSWORD, device)

        sessions = await self.service.list_sessions(user["id"])

        self.assertEqual([s.device_info for s in sessions], list(reversed(devices)))

    async def test_register_verify_login_logout_all(self):
        user = await self._verified_account()
        first = await self.service.login("a@x.com", STRONG_PASSWORD, "phone")
        await self.service.login("a@x.com", STRONG_PASSWORD, "laptop")

        self.assertEqual(len(await self.service.list_sessions(user["id"])), 2)
        self.assertEqual(await self.service.logout_all(user["id"]), 2)
        self.assertEqual(await self.service.list_sessions(user["id"]), [])
        self.assertTrue((await self.sessions.get_by_token(first["tokens"]["refresh_token"]))["revoked"])


if __name__ == "__main__":
    unittest.main()
