"""TTL key/value store interface."""

from __future__ import annotations

from typing import Protocol


class EphemeralStore(Protocol):
    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    async def get(self, key: str) -> str | None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def get_and_delete(self, key: str) -> str | None:
        """Return the value and remove the key in one atomic step."""
        ...
