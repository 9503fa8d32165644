"""Append-only audit of login attempts."""

from __future__ import annotations

import logging

from auth.interfaces.login_history_store import LoginHistoryStore

logger = logging.getLogger(__name__)


class LoginAuditLog:
    def __init__(self, store: LoginHistoryStore) -> None:
        self._store = store

    async def record(
        self,
        account_id: str | None,
        ip_address: str | None,
        user_agent: str | None,
        success: bool,
    ) -> None:
        """Write one attempt. Storage errors are logged, never raised."""
        try:
            await self._store.append_attempt(
                {
                    "user_id": account_id,
                    "ip_address": ip_address or "unknown",
                    "user_agent": user_agent,
                    "success": success,
                }
            )
        except Exception:
            logger.exception("Failed to record login attempt for user %s", account_id)

    async def history(self, account_id: str, limit: int = 20) -> list[dict]:
        return await self._store.list_attempts(account_id, limit=limit)
