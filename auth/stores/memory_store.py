"""In-memory auth stores."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable
from uuid import uuid4

from auth.exceptions import EmailAlreadyRegistered


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_email: dict[str, dict[str, Any]] = {}
        self._users_by_id: dict[str, dict[str, Any]] = {}

    async def get_by_email(self, email: str) -> dict | None:
        async with self._lock:
            user = self._users_by_email.get(email)
            return dict(user) if user else None

    async def get_by_id(self, user_id: str) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            return dict(user) if user else None

    async def create_user(self, data: dict) -> dict:
        async with self._lock:
            if data["email"] in self._users_by_email:
                raise EmailAlreadyRegistered()
            payload = dict(data)
            payload["id"] = str(uuid4())
            payload.setdefault("name", None)
            payload.setdefault("email_verified", False)
            payload["created_at"] = payload.get("created_at", int(time.time()))
            payload["updated_at"] = payload.get("updated_at", payload["created_at"])
            self._users_by_email[payload["email"]] = payload
            self._users_by_id[payload["id"]] = payload
            return dict(payload)

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        await self.update_user(user_id, {"hashed_password": hashed_password})

    async def mark_email_verified(self, user_id: str) -> None:
        await self.update_user(user_id, {"email_verified": True})

    async def update_user(self, user_id: str, updates: dict) -> dict:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            if not user:
                raise ValueError("User not found")
            for key, value in updates.items():
                if key in {"id", "email", "created_at"}:
                    continue
                user[key] = value
            user["updated_at"] = int(time.time())
            return dict(user)


class MemorySessionStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._sessions: dict[str, dict[str, Any]] = {}

    async def create_session(
        self,
        user_id: str,
        token: str,
        expires_at: int,
        device_info: str | None = None,
        ip_address: str | None = None,
        created_at: float | None = None,
    ) -> dict:
        async with self._lock:
            if token in self._sessions:
                raise ValueError("Session token already exists")
            session = {
                "id": str(uuid4()),
                "user_id": user_id,
                "token": token,
                "expires_at": expires_at,
                "revoked": False,
                "device_info": device_info,
                "ip_address": ip_address,
                "created_at": time.time() if created_at is None else created_at,
            }
            self._sessions[token] = session
            return dict(session)

    async def get_by_token(self, token: str) -> dict | None:
        async with self._lock:
            session = self._sessions.get(token)
            return dict(session) if session else None

    async def get_by_id(self, session_id: str) -> dict | None:
        async with self._lock:
            for session in self._sessions.values():
                if session["id"] == session_id:
                    return dict(session)
            return None

    async def list_active(self, user_id: str, now: int) -> list[dict]:
        async with self._lock:
            active = [
                dict(session)
                for session in reversed(self._sessions.values())
                if session["user_id"] == user_id
                and not session["revoked"]
                and session["expires_at"] >= now
            ]
        # Stable sort: equal timestamps keep newest-inserted first.
        return sorted(active, key=lambda session: session["created_at"], reverse=True)

    async def revoke_session(self, token: str) -> None:
        async with self._lock:
            session = self._sessions.get(token)
            if session:
                session["revoked"] = True

    async def revoke_all_for_user(self, user_id: str) -> int:
        async with self._lock:
            count = 0
            for session in self._sessions.values():
                if session["user_id"] == user_id and not session["revoked"]:
                    session["revoked"] = True
                    count += 1
            return count


class MemoryLoginHistoryStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._attempts: list[dict[str, Any]] = []

    async def append_attempt(self, data: dict) -> None:
        async with self._lock:
            payload = dict(data)
            payload["id"] = str(uuid4())
            payload.setdefault("created_at", int(time.time()))
            self._attempts.append(payload)

    async def list_attempts(self, user_id: str, limit: int = 20) -> list[dict]:
        async with self._lock:
            attempts = [dict(a) for a in self._attempts if a.get("user_id") == user_id]
        return list(reversed(attempts))[:limit]


class MemoryEphemeralStore:
    """Dict-backed TTL store. Expired keys are dropped on access."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = asyncio.Lock()
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def _live(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return value

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        async with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._live(key)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def get_and_delete(self, key: str) -> str | None:
        async with self._lock:
            value = self._live(key)
            self._entries.pop(key, None)
            return value


class MemoryRateLimiter:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._hits: dict[str, list[float]] = {}

    async def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        async with self._lock:
            hits = self._hits.get(key, [])
            hits = [timestamp for timestamp in hits if (now - timestamp) < window_seconds]
            if len(hits) >= limit:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True
