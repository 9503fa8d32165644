"""Request throttling interface for the public auth routes."""

from __future__ import annotations

from typing import Protocol


class RateLimiter(Protocol):
    async def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        """Count one hit against ``key``; False once ``limit`` hits fall inside the window."""
        ...
