"""Shared fixtures for the auth tests."""

from __future__ import annotations

import time
from dataclasses import dataclass

from auth.config import AuthConfig
from auth.services.auth_service import AuthService
from auth.stores.memory_store import (
    MemoryEphemeralStore,
    MemoryLoginHistoryStore,
    MemorySessionStore,
    MemoryUserStore,
)

# Cheap argon2 parameters keep the suite fast.
TEST_CONFIG = AuthConfig(
    JWT_ACCESS_SECRET="access-secret-for-tests",
    JWT_REFRESH_SECRET="refresh-secret-for-tests",
    ARGON2_MEMORY_COST=1024,
    ARGON2_TIME_COST=1,
    ARGON2_PARALLELISM=1,
    AUTH_STORE="memory",
    EPHEMERAL_STORE="memory",
    LOGIN_RATE_LIMIT_PER_MINUTE=1000,
    REGISTER_RATE_LIMIT_PER_HOUR=1000,
    EMAIL_RATE_LIMIT_PER_HOUR=1000,
)

STRONG_PASSWORD = "Str0ng!Pw"


class FakeClock:
    def __init__(self, start: float | None = None) -> None:
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    def __init__(self, deliver: bool = True) -> None:
        self.deliver = deliver
        self.verification_links: list[tuple[str, str]] = []
        self.reset_links: list[tuple[str, str]] = []

    async def send_verification_link(self, email: str, token: str) -> bool:
        self.verification_links.append((email, token))
        return self.deliver

    async def send_password_reset_link(self, email: str, token: str) -> bool:
        self.reset_links.append((email, token))
        return self.deliver


@dataclass
class Harness:
    service: AuthService
    users: MemoryUserStore
    sessions: MemorySessionStore
    history: MemoryLoginHistoryStore
    ephemeral: MemoryEphemeralStore
    notifier: RecordingNotifier
    clock: FakeClock

    async def verified_user(self, email: str = "a@x.com", password: str = STRONG_PASSWORD) -> dict:
        await self.service.register(email, password, name="Ada")
        _, token = self.notifier.verification_links[-1]
        return await self.service.verify_email(token)


def build_harness(config: AuthConfig = TEST_CONFIG, clock: FakeClock | None = None) -> Harness:
    clock = clock or FakeClock()
    users = MemoryUserStore()
    sessions = MemorySessionStore()
    history = MemoryLoginHistoryStore()
    ephemeral = MemoryEphemeralStore(clock=clock)
    notifier = RecordingNotifier()
    service = AuthService(
        user_store=users,
        session_store=sessions,
        login_history_store=history,
        ephemeral_store=ephemeral,
        notifier=notifier,
        config=config,
        clock=clock,
    )
    return Harness(service, users, sessions, history, ephemeral, notifier, clock)
