import unittest

from auth.services.session_registry import SessionRegistry
from auth.stores.memory_store import MemorySessionStore
from support import FakeClock


class TestSessionRegistry(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock(start=1_000_000.0)
        self.store = MemorySessionStore()
        self.registry = SessionRegistry(self.store, clock=self.clock)

    async def _create(self, token, account="user-1", ttl=3600, device="phone"):
        return await self.registry.create(account, token, device, "10.0.0.1", int(self.clock.now) + ttl)

    async def test_create_and_find(self):
        record = await self._create("token-a")

        found = await self.registry.find_by_token("token-a")

        self.assertEqual(found, record)
        self.assertFalse(found.revoked)
        self.assertEqual(found.device_info, "phone")
        self.assertEqual(found.created_at, int(self.clock.now))
        self.assertEqual(await self.registry.find_by_id(record.id), record)
        self.assertIsNone(await self.registry.find_by_token("missing"))

    async def test_list_active_orders_by_registry_clock(self):
        await self._create("first")
        self.clock.advance(0.25)
        await self._create("second")
        self.clock.advance(0.25)
        await self._create("third")

        active = await self.registry.list_active("user-1")

        self.assertEqual([record.token for record in active], ["third", "second", "first"])
        self.assertEqual({record.created_at for record in active}, {1_000_000})

    async def test_list_active_excludes_revoked_and_expired_newest_first(self):
        await self._create("old")
        await self._create("short", ttl=10)
        await self._create("revoked")
        await self._create("new")
        await self._create("other-user", account="user-2")
        await self.registry.revoke("revoked")
        self.clock.advance(60)

        active = await self.registry.list_active("user-1")

        self.assertEqual([record.token for record in active], ["new", "old"])

    async def test_revoke_all_marks_rows_without_deleting(self):
        await self._create("token-a")
        await self._create("token-b")

        count = await self.registry.revoke_all_for_account("user-1")

        self.assertEqual(count, 2)
        self.assertEqual(await self.registry.list_active("user-1"), [])
        record = await self.registry.find_by_token("token-a")
        self.assertIsNotNone(record)
        self.assertTrue(record.revoked)

    async def test_public_view_hides_token(self):
        record = await self._create("token-a")

        self.assertNotIn("token", record.public())
        self.assertEqual(record.public()["id"], record.id)


if __name__ == "__main__":
    unittest.main()
