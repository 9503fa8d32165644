"""Password hashing and strength rules."""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field
from enum import Enum

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from auth.config import AuthConfig


class PasswordRule(str, Enum):
    MIN_LENGTH = "min_length"
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    DIGIT = "digit"
    SPECIAL = "special"


RULE_MESSAGES = {
    PasswordRule.MIN_LENGTH: "Password must be at least {min_length} characters long",
    PasswordRule.LOWERCASE: "Password must contain at least one lowercase letter",
    PasswordRule.UPPERCASE: "Password must contain at least one uppercase letter",
    PasswordRule.DIGIT: "Password must contain at least one number",
    PasswordRule.SPECIAL: "Password must contain at least one special character",
}


@dataclass(frozen=True)
class PasswordStrength:
    is_valid: bool
    violations: list[PasswordRule] = field(default_factory=list)
    min_length: int = 8

    @property
    def messages(self) -> list[str]:
        return [RULE_MESSAGES[rule].format(min_length=self.min_length) for rule in self.violations]


class CredentialVerifier:
    """Argon2id hashing for account secrets.

    The produced hash is in PHC format, so the algorithm, cost parameters and
    salt travel with it and verification needs nothing else.
    """

    def __init__(self, config: AuthConfig | None = None) -> None:
        self._config = config or AuthConfig()
        self._hasher = PasswordHasher(
            time_cost=self._config.ARGON2_TIME_COST,
            memory_cost=self._config.ARGON2_MEMORY_COST,
            parallelism=self._config.ARGON2_PARALLELISM,
            type=Type.ID,
        )
        # Unknown-account logins verify against this so they cost the same as a
        # wrong password.
        self._dummy_hash = self._hasher.hash(secrets.token_urlsafe(16))

    def hash(self, secret: str) -> str:
        return self._hasher.hash(secret)

    def verify(self, hashed: str | None, secret: str) -> bool:
        """Verify a secret against a hash. Never raises."""
        if not hashed:
            return False
        try:
            return self._hasher.verify(hashed, secret)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False

    def verify_dummy(self, secret: str) -> bool:
        self.verify(self._dummy_hash, secret)
        return False

    def needs_rehash(self, hashed: str) -> bool:
        try:
            return self._hasher.check_needs_rehash(hashed)
        except InvalidHashError:
            return True

    def check_strength(self, secret: str) -> PasswordStrength:
        min_length = self._config.PASSWORD_MIN_LENGTH
        violations: list[PasswordRule] = []

        if len(secret) < min_length:
            violations.append(PasswordRule.MIN_LENGTH)
        if not re.search(r"[a-z]", secret):
            violations.append(PasswordRule.LOWERCASE)
        if not re.search(r"[A-Z]", secret):
            violations.append(PasswordRule.UPPERCASE)
        if not re.search(r"[0-9]", secret):
            violations.append(PasswordRule.DIGIT)
        if not re.search(r"[^a-zA-Z0-9]", secret):
            violations.append(PasswordRule.SPECIAL)

        return PasswordStrength(
            is_valid=not violations,
            violations=violations,
            min_length=min_length,
        )
