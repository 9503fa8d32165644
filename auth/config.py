"""Auth configuration management."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before reading config
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)
else:
    load_dotenv(override=True)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Each process gets its own random secrets unless configured. Tokens issued
# with these do not survive a restart.
_DEFAULT_ACCESS_SECRET = secrets.token_urlsafe(32)
_DEFAULT_REFRESH_SECRET = secrets.token_urlsafe(32)


@dataclass(frozen=True)
class AuthConfig:
    """Configuration values for auth flows.

    Fields are read from the environment once, at import. Instances are
    immutable and may be passed around freely; tests build their own with
    keyword overrides.
    """

    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = int(os.getenv("EMAIL_VERIFICATION_EXPIRE_HOURS", "24"))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "60"))

    JWT_ALGORITHM: str = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
    JWT_ACCESS_SECRET: str = os.getenv("JWT_ACCESS_SECRET", _DEFAULT_ACCESS_SECRET)
    JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET", _DEFAULT_REFRESH_SECRET)

    ARGON2_MEMORY_COST: int = int(os.getenv("ARGON2_MEMORY_COST", "65536"))
    ARGON2_TIME_COST: int = int(os.getenv("ARGON2_TIME_COST", "3"))
    ARGON2_PARALLELISM: int = int(os.getenv("ARGON2_PARALLELISM", "4"))
    PASSWORD_MIN_LENGTH: int = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))

    # "legacy": a failed attempt row is written before the password check and a
    # second, successful row after it. "single": one row per attempt.
    LOGIN_AUDIT_MODE: str = os.getenv("LOGIN_AUDIT_MODE", "legacy")

    COOKIE_SECURE: bool = _parse_bool(os.getenv("COOKIE_SECURE"), False)
    COOKIE_HTTP_ONLY: bool = _parse_bool(os.getenv("COOKIE_HTTP_ONLY"), True)
    COOKIE_SAMESITE: str = os.getenv("COOKIE_SAME_SITE", "strict")
    COOKIE_DOMAIN: str | None = os.getenv("COOKIE_DOMAIN")
    CLIENT_TYPE_HEADER: str = os.getenv("CLIENT_TYPE_HEADER", "X-Client-Type")

    LOGIN_RATE_LIMIT_PER_MINUTE: int = int(os.getenv("LOGIN_RATE_LIMIT_PER_MINUTE", "5"))
    REGISTER_RATE_LIMIT_PER_HOUR: int = int(os.getenv("REGISTER_RATE_LIMIT_PER_HOUR", "3"))
    EMAIL_RATE_LIMIT_PER_HOUR: int = int(os.getenv("EMAIL_RATE_LIMIT_PER_HOUR", "3"))

    EMAIL_PROVIDER: str = os.getenv("EMAIL_PROVIDER", "resend")
    EMAIL_FROM_NAME: str = os.getenv("EMAIL_FROM_NAME", "Accounts")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "no-reply@example.com")
    RESEND_API_KEY: str | None = os.getenv("RESEND_API_KEY")
    EMAIL_TIMEOUT_SECONDS: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))
    API_URL: str = os.getenv("API_URL", "http://localhost:8000/api/v1")
    WEB_URL: str = os.getenv("WEB_URL", "http://localhost:3000")

    # Durable store: "postgres" (production) or "memory" (testing)
    AUTH_STORE: str = os.getenv("AUTH_STORE", "postgres")
    # TTL store: "redis" (production) or "memory" (testing)
    EPHEMERAL_STORE: str = os.getenv("EPHEMERAL_STORE", "redis")

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    @property
    def email_verification_ttl_seconds(self) -> int:
        return self.EMAIL_VERIFICATION_EXPIRE_HOURS * 60 * 60

    @property
    def password_reset_ttl_seconds(self) -> int:
        return self.PASSWORD_RESET_EXPIRE_MINUTES * 60

    def validate(self) -> None:
        """Fail fast on settings the token engine cannot run with."""
        if not self.JWT_ACCESS_SECRET or not self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be set")
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if self.LOGIN_AUDIT_MODE not in {"legacy", "single"}:
            raise ValueError(f"Unknown LOGIN_AUDIT_MODE: {self.LOGIN_AUDIT_MODE}")
        if self.AUTH_STORE not in {"postgres", "memory"}:
            raise ValueError(f"Unknown AUTH_STORE: {self.AUTH_STORE}")
        if self.EPHEMERAL_STORE not in {"redis", "memory"}:
            raise ValueError(f"Unknown EPHEMERAL_STORE: {self.EPHEMERAL_STORE}")
