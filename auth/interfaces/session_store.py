"""Session store interface for refresh tokens."""

from __future__ import annotations

from typing import Protocol


class SessionStore(Protocol):
    async def create_session(
        self,
        user_id: str,
        token: str,
        expires_at: int,
        device_info: str | None = None,
        ip_address: str | None = None,
        created_at: float | None = None,
    ) -> dict:
        """Persist a session. ``created_at`` is unix seconds and orders ``list_active``."""
        ...

    async def get_by_token(self, token: str) -> dict | None:
        ...

    async def get_by_id(self, session_id: str) -> dict | None:
        ...

    async def list_active(self, user_id: str, now: int) -> list[dict]:
        ...

    async def revoke_session(self, token: str) -> None:
        ...

    async def revoke_all_for_user(self, user_id: str) -> int:
        ...
