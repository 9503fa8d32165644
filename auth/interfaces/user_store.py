"""Account store interface."""

from __future__ import annotations

from typing import Protocol


class UserStore(Protocol):
    """Durable account records, returned as plain dicts.

    Emails are matched exactly as registered. ``create_user`` raises
    ``EmailAlreadyRegistered`` when the address is taken, even if a
    concurrent registration won the race after the caller's lookup.
    """

    async def get_by_email(self, email: str) -> dict | None:
        ...

    async def get_by_id(self, user_id: str) -> dict | None:
        ...

    async def create_user(self, data: dict) -> dict:
        ...

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        ...

    async def mark_email_verified(self, user_id: str) -> None:
        ...

    async def update_user(self, user_id: str, updates: dict) -> dict:
        """Apply ``updates``; id, email and created_at are never changed."""
        ...
