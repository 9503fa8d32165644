"""Durable registry of issued refresh tokens."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from auth.interfaces.session_store import SessionStore


@dataclass(frozen=True)
class SessionRecord:
    id: str
    user_id: str
    token: str
    revoked: bool
    device_info: str | None
    ip_address: str | None
    created_at: int
    expires_at: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionRecord":
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            token=data["token"],
            revoked=bool(data.get("revoked", False)),
            device_info=data.get("device_info"),
            ip_address=data.get("ip_address"),
            created_at=int(data.get("created_at") or 0),
            expires_at=int(data["expires_at"]),
        )

    def public(self) -> dict[str, Any]:
        """Session fields safe to show the account owner (no token value)."""
        return {
            "id": self.id,
            "device_info": self.device_info,
            "ip_address": self.ip_address,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }


class SessionRegistry:
    """One record per issued refresh token. Rows are revoked, never deleted."""

    def __init__(self, store: SessionStore, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    async def create(
        self,
        account_id: str,
        token: str,
        device_info: str | None,
        ip_address: str | None,
        expires_at: int,
    ) -> SessionRecord:
        data = await self._store.create_session(
            account_id,
            token,
            expires_at,
            device_info=device_info,
            ip_address=ip_address,
            created_at=self._clock(),
        )
        return SessionRecord.from_dict(data)

    async def find_by_token(self, token: str) -> SessionRecord | None:
        data = await self._store.get_by_token(token)
        return SessionRecord.from_dict(data) if data else None

    async def find_by_id(self, session_id: str) -> SessionRecord | None:
        data = await self._store.get_by_id(session_id)
        return SessionRecord.from_dict(data) if data else None

    async def list_active(self, account_id: str) -> list[SessionRecord]:
        rows = await self._store.list_active(account_id, int(self._clock()))
        return [SessionRecord.from_dict(row) for row in rows]

    async def revoke(self, token: str) -> None:
        await self._store.revoke_session(token)

    async def revoke_all_for_account(self, account_id: str) -> int:
        return await self._store.revoke_all_for_user(account_id)
