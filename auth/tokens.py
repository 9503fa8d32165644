"""Signed bearer tokens.

Access and refresh tokens are JWTs signed with two different secrets and
carry a ``type`` claim. Either check on its own is enough to stop an access
token from being accepted as a refresh token.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt

from auth.config import AuthConfig
from auth.exceptions import TokenExpired, TokenInvalid

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    subject_id: str
    subject_email: str
    kind: str
    expires_at: int
    issued_at: int
    refresh_id: str | None = None


@dataclass(frozen=True)
class IssuedToken:
    token: str
    claims: TokenClaims

    @property
    def expires_at(self) -> int:
        return self.claims.expires_at


class TokenCodec:
    def __init__(
        self,
        config: AuthConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or AuthConfig()
        if not self._config.JWT_ACCESS_SECRET or not self._config.JWT_REFRESH_SECRET:
            raise ValueError("Access and refresh signing secrets are required")
        if self._config.JWT_ACCESS_SECRET == self._config.JWT_REFRESH_SECRET:
            raise ValueError("Access and refresh tokens must use different secrets")
        self._clock = clock
        self._secrets = {
            ACCESS: self._config.JWT_ACCESS_SECRET,
            REFRESH: self._config.JWT_REFRESH_SECRET,
        }
        self._ttls = {
            ACCESS: self._config.access_token_ttl_seconds,
            REFRESH: self._config.refresh_token_ttl_seconds,
        }

    def issue_access(self, subject_id: str, email: str) -> IssuedToken:
        return self._issue(ACCESS, subject_id, email)

    def issue_refresh(self, subject_id: str, email: str) -> IssuedToken:
        # jti keeps two refresh tokens for the same subject distinct even
        # when issued within the same second.
        return self._issue(REFRESH, subject_id, email, refresh_id=uuid4().hex)

    def verify_access(self, token: str) -> TokenClaims:
        return self._verify(token, ACCESS)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self._verify(token, REFRESH)

    def _issue(
        self,
        kind: str,
        subject_id: str,
        email: str,
        refresh_id: str | None = None,
    ) -> IssuedToken:
        now = int(self._clock())
        expires_at = now + self._ttls[kind]
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "email": email,
            "type": kind,
            "iat": now,
            "exp": expires_at,
        }
        if refresh_id is not None:
            payload["jti"] = refresh_id
        token = jwt.encode(payload, self._secrets[kind], algorithm=self._config.JWT_ALGORITHM)
        claims = TokenClaims(
            subject_id=str(subject_id),
            subject_email=email,
            kind=kind,
            expires_at=expires_at,
            issued_at=now,
            refresh_id=refresh_id,
        )
        return IssuedToken(token=token, claims=claims)

    def _verify(self, token: str, expected_kind: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise TokenInvalid()
        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_kind],
                algorithms=[self._config.JWT_ALGORITHM],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTError as exc:
            raise TokenInvalid() from exc

        if payload.get("type") != expected_kind:
            raise TokenInvalid()
        if not payload.get("email"):
            raise TokenInvalid()
        refresh_id = payload.get("jti")
        if expected_kind == REFRESH and not refresh_id:
            raise TokenInvalid()

        return TokenClaims(
            subject_id=str(payload["sub"]),
            subject_email=payload["email"],
            kind=payload["type"],
            expires_at=int(payload["exp"]),
            issued_at=int(payload.get("iat", 0)),
            refresh_id=refresh_id,
        )
