"""Single-use, time-boxed tokens for email verification and password reset."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from auth.exceptions import TokenNotFound
from auth.interfaces.ephemeral_store import EphemeralStore


class TokenPurpose(str, Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class EphemeralTokenStore:
    """Issues and consumes single-use tokens.

    Keys are namespaced by purpose, so a verification token can never be
    redeemed as a reset token. Consumption is a single atomic get-and-delete
    on the underlying store; expiry is left to the store's own TTL.
    """

    def __init__(self, store: EphemeralStore) -> None:
        self._store = store

    @staticmethod
    def _key(purpose: TokenPurpose, token: str) -> str:
        return f"{TokenPurpose(purpose).value}:{token}"

    async def issue(self, purpose: TokenPurpose, subject_id: str, ttl_seconds: int) -> str:
        token = str(uuid4())
        await self._store.set_with_ttl(self._key(purpose, token), str(subject_id), ttl_seconds)
        return token

    async def consume(self, purpose: TokenPurpose, token: str) -> str:
        if not token:
            raise TokenNotFound()
        subject_id = await self._store.get_and_delete(self._key(purpose, token))
        if subject_id is None:
            raise TokenNotFound()
        return subject_id
