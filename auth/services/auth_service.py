"""Core auth service."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from auth.config import AuthConfig
from auth.exceptions import (
    AccountNotFound,
    EmailAlreadyRegistered,
    EmailNotVerified,
    InvalidCredentials,
    SessionNotFound,
    TokenInvalid,
    TokenNotFound,
    TokenRevoked,
    WeakPassword,
)
from auth.interfaces.ephemeral_store import EphemeralStore
from auth.interfaces.login_history_store import LoginHistoryStore
from auth.interfaces.notifier import Notifier
from auth.interfaces.session_store import SessionStore
from auth.interfaces.user_store import UserStore
from auth.security import CredentialVerifier
from auth.services.ephemeral_tokens import EphemeralTokenStore, TokenPurpose
from auth.services.login_audit import LoginAuditLog
from auth.services.revocation import RevocationList
from auth.services.session_registry import SessionRecord, SessionRegistry
from auth.tokens import TokenCodec

logger = logging.getLogger(__name__)


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    """Account fields that may leave the service. Never includes the hash."""
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "name": user.get("name"),
        "email_verified": bool(user.get("email_verified", False)),
        "created_at": user.get("created_at"),
        "updated_at": user.get("updated_at"),
    }


class AuthService:
    """Register, login, refresh and revoke flows.

    Refresh tokens are trusted only after three checks, in this order: the
    blacklist, the signature/kind/expiry, and the durable session record.
    The blacklist is checked first because it is written before the durable
    record on logout.
    """

    def __init__(
        self,
        user_store: UserStore,
        session_store: SessionStore,
        login_history_store: LoginHistoryStore,
        ephemeral_store: EphemeralStore,
        notifier: Notifier,
        config: AuthConfig | None = None,
        verifier: CredentialVerifier | None = None,
        codec: TokenCodec | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or AuthConfig()
        self._users = user_store
        self._sessions = SessionRegistry(session_store, clock=clock)
        self._audit = LoginAuditLog(login_history_store)
        self._ephemeral = EphemeralTokenStore(ephemeral_store)
        self._revocations = RevocationList(ephemeral_store)
        self._notifier = notifier
        self._verifier = verifier or CredentialVerifier(self._config)
        self._codec = codec or TokenCodec(self._config, clock=clock)

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    @property
    def verifier(self) -> CredentialVerifier:
        return self._verifier

    def _require_strong(self, password: str) -> None:
        strength = self._verifier.check_strength(password)
        if not strength.is_valid:
            raise WeakPassword(strength.messages)

    async def register(self, email: str, password: str, name: str | None = None) -> dict[str, Any]:
        self._require_strong(password)

        existing = await self._users.get_by_email(email)
        if existing:
            raise EmailAlreadyRegistered()

        user = await self._users.create_user(
            {
                "email": email,
                "name": name,
                "hashed_password": self._verifier.hash(password),
                "email_verified": False,
            }
        )

        token = await self._ephemeral.issue(
            TokenPurpose.EMAIL_VERIFICATION,
            user["id"],
            self._config.email_verification_ttl_seconds,
        )
        if not await self._notifier.send_verification_link(user["email"], token):
            logger.warning("Verification email for user %s was not delivered", user["id"])

        logger.info("User registered: %s", user["id"])
        return public_user(user)

    async def verify_email(self, token: str) -> dict[str, Any]:
        try:
            user_id = await self._ephemeral.consume(TokenPurpose.EMAIL_VERIFICATION, token)
        except TokenNotFound as exc:
            raise TokenInvalid("Invalid or expired token") from exc

        user = await self._users.get_by_id(user_id)
        if not user:
            raise TokenInvalid("Invalid or expired token")
        if not user.get("email_verified"):
            await self._users.mark_email_verified(user_id)
            user["email_verified"] = True

        logger.info("Email verified for user %s", user_id)
        return public_user(user)

    async def login(
        self,
        email: str,
        password: str,
        device_info: str | None = None,
        ip_address: str | None = None,
    ) -> dict[str, Any]:
        legacy_audit = self._config.LOGIN_AUDIT_MODE == "legacy"

        user = await self._users.get_by_email(email)
        if user and legacy_audit:
            # Written before the password check; a successful login adds a
            # second row rather than updating this one.
            await self._audit.record(user["id"], ip_address, device_info, False)

        if not user:
            self._verifier.verify_dummy(password)
            raise InvalidCredentials()

        if not self._verifier.verify(user.get("hashed_password"), password):
            if not legacy_audit:
                await self._audit.record(user["id"], ip_address, device_info, False)
            raise InvalidCredentials()

        if not user.get("email_verified"):
            if not legacy_audit:
                await self._audit.record(user["id"], ip_address, device_info, False)
            raise EmailNotVerified()

        if self._verifier.needs_rehash(user["hashed_password"]):
            await self._users.update_password(user["id"], self._verifier.hash(password))

        tokens = await self._issue_tokens(user, device_info, ip_address)
        await self._audit.record(user["id"], ip_address, device_info, True)

        logger.info("Login succeeded for user %s", user["id"])
        return {"user": public_user(user), "tokens": tokens}

    async def refresh(self, refresh_token: str) -> dict[str, Any]:
        if refresh_token and await self._revocations.is_revoked(refresh_token):
            raise TokenRevoked()

        claims = self._codec.verify_refresh(refresh_token)

        session = await self._sessions.find_by_token(refresh_token)
        if session is None or session.revoked:
            raise TokenInvalid("Invalid or revoked token")
        if session.user_id != claims.subject_id:
            raise TokenInvalid("Invalid or revoked token")

        access = self._codec.issue_access(claims.subject_id, claims.subject_email)
        return {"access_token": access.token, "access_expires_at": access.expires_at}

    async def logout(self, refresh_token: str | None) -> None:
        """Revoke a refresh token. Unknown or malformed tokens are not an error."""
        if not refresh_token:
            return
        try:
            await self._revocations.revoke(refresh_token, self._config.refresh_token_ttl_seconds)
        except Exception:
            logger.exception("Failed to blacklist refresh token on logout")
        try:
            await self._sessions.revoke(refresh_token)
        except Exception:
            logger.exception("Failed to revoke session record on logout")

    async def logout_all(self, account_id: str) -> int:
        """Revoke every active session of an account.

        Blacklisting is best effort per token; only a failure of the final
        durable bulk update is raised. Returns the number of tokens
        blacklisted.
        """
        sessions = await self._sessions.list_active(account_id)
        report = await self._revocations.revoke_many(
            [session.token for session in sessions],
            self._config.refresh_token_ttl_seconds,
        )
        if not report.complete:
            logger.warning(
                "Blacklisted %d of %d sessions for user %s",
                report.revoked,
                len(sessions),
                account_id,
            )

        await self._sessions.revoke_all_for_account(account_id)
        logger.info("Logged out all sessions for user %s", account_id)
        return report.revoked

    async def forgot_password(self, email: str) -> None:
        user = await self._users.get_by_email(email)
        # Same outcome either way so callers cannot probe for accounts.
        if not user:
            return

        token = await self._ephemeral.issue(
            TokenPurpose.PASSWORD_RESET,
            user["id"],
            self._config.password_reset_ttl_seconds,
        )
        if not await self._notifier.send_password_reset_link(user["email"], token):
            logger.warning("Password reset email for user %s was not delivered", user["id"])
        logger.info("Password reset requested for user %s", user["id"])

    async def reset_password(self, token: str, new_password: str) -> None:
        # Checked before consuming so a rejected password does not burn the link.
        self._require_strong(new_password)

        try:
            user_id = await self._ephemeral.consume(TokenPurpose.PASSWORD_RESET, token)
        except TokenNotFound as exc:
            raise TokenInvalid("Invalid or expired token") from exc

        user = await self._users.get_by_id(user_id)
        if not user:
            raise AccountNotFound()

        await self._users.update_password(user_id, self._verifier.hash(new_password))
        await self.logout_all(user_id)
        logger.info("Password reset for user %s", user_id)

    async def authenticate(self, access_token: str) -> dict[str, Any]:
        claims = self._codec.verify_access(access_token)
        user = await self._users.get_by_id(claims.subject_id)
        if not user:
            raise AccountNotFound()
        return public_user(user)

    async def get_profile(self, account_id: str) -> dict[str, Any]:
        user = await self._users.get_by_id(account_id)
        if not user:
            raise AccountNotFound()
        return public_user(user)

    async def update_profile(self, account_id: str, name: str | None) -> dict[str, Any]:
        if not await self._users.get_by_id(account_id):
            raise AccountNotFound()
        user = await self._users.update_user(account_id, {"name": name})
        return public_user(user)

    async def list_sessions(self, account_id: str) -> list[SessionRecord]:
        return await self._sessions.list_active(account_id)

    async def revoke_session(self, account_id: str, session_id: str) -> None:
        """Revoke one device's session, if it belongs to the account."""
        session = await self._sessions.find_by_id(session_id)
        if session is None or session.user_id != account_id:
            raise SessionNotFound()

        await self._revocations.revoke(session.token, self._config.refresh_token_ttl_seconds)
        await self._sessions.revoke(session.token)
        logger.info("Session %s revoked for user %s", session_id, account_id)

    async def login_history(self, account_id: str, limit: int = 20) -> list[dict]:
        return await self._audit.history(account_id, limit=limit)

    async def _issue_tokens(
        self,
        user: dict[str, Any],
        device_info: str | None,
        ip_address: str | None,
    ) -> dict[str, Any]:
        access = self._codec.issue_access(user["id"], user["email"])
        refresh = self._codec.issue_refresh(user["id"], user["email"])
        await self._sessions.create(
            user["id"],
            refresh.token,
            device_info,
            ip_address,
            refresh.expires_at,
        )
        return {
            "access_token": access.token,
            "refresh_token": refresh.token,
            "access_expires_at": access.expires_at,
            "refresh_expires_at": refresh.expires_at,
        }
