"""PostgreSQL auth stores using SQLAlchemy."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from auth.exceptions import EmailAlreadyRegistered
from db.models.account import Account
from db.models.auth import LoginHistory, RefreshToken


def _timestamp(value: datetime | None) -> int | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _from_timestamp(value: float | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _account_to_dict(account: Account) -> dict[str, Any]:
    return {
        "id": account.id,
        "email": account.email,
        "name": account.name,
        "hashed_password": account.hashed_password,
        "email_verified": bool(account.email_verified),
        "created_at": _timestamp(account.created_at),
        "updated_at": _timestamp(account.updated_at),
    }


def _session_to_dict(record: RefreshToken) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "token": record.token,
        "revoked": bool(record.revoked),
        "device_info": record.device_info,
        "ip_address": record.ip_address,
        "created_at": _timestamp(record.created_at),
        "expires_at": record.expires_at,
    }


class _SQLStoreBase:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()


class PostgresUserStore(_SQLStoreBase):
    """User store backed by PostgreSQL."""

    async def get_by_email(self, email: str) -> dict | None:
        with self._get_session() as db:
            account = db.execute(
                select(Account).where(Account.email == email)
            ).scalar_one_or_none()
            return _account_to_dict(account) if account else None

    async def get_by_id(self, user_id: str) -> dict | None:
        with self._get_session() as db:
            account = db.get(Account, user_id)
            return _account_to_dict(account) if account else None

    async def create_user(self, data: dict) -> dict:
        with self._get_session() as db:
            account = Account(
                email=data["email"],
                name=data.get("name"),
                hashed_password=data["hashed_password"],
                email_verified=bool(data.get("email_verified", False)),
            )
            db.add(account)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise EmailAlreadyRegistered() from exc
            db.refresh(account)
            return _account_to_dict(account)

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        await self.update_user(user_id, {"hashed_password": hashed_password})

    async def mark_email_verified(self, user_id: str) -> None:
        await self.update_user(user_id, {"email_verified": True})

    async def update_user(self, user_id: str, updates: dict) -> dict:
        with self._get_session() as db:
            account = db.get(Account, user_id)
            if not account:
                raise ValueError("User not found")
            for key, value in updates.items():
                if key in {"id", "email", "created_at"}:
                    continue
                if hasattr(account, key):
                    setattr(account, key, value)
            db.commit()
            db.refresh(account)
            return _account_to_dict(account)


class PostgresSessionStore(_SQLStoreBase):
    """Refresh token records backed by PostgreSQL."""

    async def create_session(
        self,
        user_id: str,
        token: str,
        expires_at: int,
        device_info: str | None = None,
        ip_address: str | None = None,
        created_at: float | None = None,
    ) -> dict:
        with self._get_session() as db:
            record = RefreshToken(
                user_id=user_id,
                token=token,
                expires_at=expires_at,
                device_info=device_info,
                ip_address=ip_address,
                revoked=False,
                created_at=_from_timestamp(created_at),
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            return _session_to_dict(record)

    async def get_by_token(self, token: str) -> dict | None:
        with self._get_session() as db:
            record = db.execute(
                select(RefreshToken).where(RefreshToken.token == token)
            ).scalar_one_or_none()
            return _session_to_dict(record) if record else None

    async def get_by_id(self, session_id: str) -> dict | None:
        with self._get_session() as db:
            record = db.get(RefreshToken, session_id)
            return _session_to_dict(record) if record else None

    async def list_active(self, user_id: str, now: int) -> list[dict]:
        with self._get_session() as db:
            records = db.execute(
                select(RefreshToken)
                .where(
                    RefreshToken.user_id == user_id,
                    RefreshToken.revoked.is_(False),
                    RefreshToken.expires_at >= now,
                )
                .order_by(RefreshToken.created_at.desc())
            ).scalars().all()
            return [_session_to_dict(record) for record in records]

    async def revoke_session(self, token: str) -> None:
        with self._get_session() as db:
            db.execute(
                update(RefreshToken)
                .where(RefreshToken.token == token)
                .values(revoked=True)
            )
            db.commit()

    async def revoke_all_for_user(self, user_id: str) -> int:
        with self._get_session() as db:
            result = db.execute(
                update(RefreshToken)
                .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
                .values(revoked=True)
            )
            db.commit()
            return result.rowcount or 0


class PostgresLoginHistoryStore(_SQLStoreBase):
    """Append-only login attempts backed by PostgreSQL."""

    async def append_attempt(self, data: dict) -> None:
        with self._get_session() as db:
            db.add(
                LoginHistory(
                    user_id=data.get("user_id"),
                    ip_address=data.get("ip_address") or "unknown",
                    user_agent=data.get("user_agent"),
                    success=bool(data.get("success", False)),
                )
            )
            db.commit()

    async def list_attempts(self, user_id: str, limit: int = 20) -> list[dict]:
        with self._get_session() as db:
            rows = db.execute(
                select(LoginHistory)
                .where(LoginHistory.user_id == user_id)
                .order_by(LoginHistory.created_at.desc())
                .limit(limit)
            ).scalars().all()
            return [
                {
                    "id": row.id,
                    "user_id": row.user_id,
                    "ip_address": row.ip_address,
                    "user_agent": row.user_agent,
                    "success": bool(row.success),
                    "created_at": _timestamp(row.created_at),
                }
                for row in rows
            ]
