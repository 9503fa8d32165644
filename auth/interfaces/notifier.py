"""Outbound notification interface."""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    async def send_verification_link(self, email: str, token: str) -> bool:
        ...

    async def send_password_reset_link(self, email: str, token: str) -> bool:
        ...
