"""Login history store interface."""

from __future__ import annotations

from typing import Protocol


class LoginHistoryStore(Protocol):
    async def append_attempt(self, data: dict) -> None:
        ...

    async def list_attempts(self, user_id: str, limit: int = 20) -> list[dict]:
        ...
