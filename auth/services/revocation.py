"""Blacklist of revoked refresh tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from auth.interfaces.ephemeral_store import EphemeralStore

logger = logging.getLogger(__name__)

_MARKER = "1"


@dataclass
class RevocationReport:
    revoked: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


class RevocationList:
    """TTL-bound deny-list keyed by the full refresh token value.

    Presence of a key is authoritative: a listed token is rejected whatever
    its durable session record says.
    """

    def __init__(self, store: EphemeralStore) -> None:
        self._store = store

    @staticmethod
    def _key(token: str) -> str:
        return f"blacklist:{token}"

    async def revoke(self, token: str, ttl_seconds: int) -> None:
        await self._store.set_with_ttl(self._key(token), _MARKER, ttl_seconds)

    async def revoke_many(self, tokens: Iterable[str], ttl_seconds: int) -> RevocationReport:
        """Revoke each token independently; one failure does not stop the rest."""
        report = RevocationReport()
        for token in tokens:
            try:
                await self.revoke(token, ttl_seconds)
            except Exception:
                logger.exception("Failed to blacklist refresh token")
                report.failed.append(token)
            else:
                report.revoked += 1
        return report

    async def is_revoked(self, token: str) -> bool:
        return await self._store.get(self._key(token)) is not None
