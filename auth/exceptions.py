"""Auth exceptions."""

from __future__ import annotations

from enum import Enum


class AuthErrorKind(str, Enum):
    """Closed set of failure kinds the auth engine can report."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    TOKEN_REVOKED = "token_revoked"
    TOKEN_NOT_FOUND = "token_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    WEAK_PASSWORD = "weak_password"
    ACCOUNT_NOT_FOUND = "account_not_found"


class AuthException(Exception):
    """Base auth exception with HTTP status."""

    kind: AuthErrorKind | None = None
    default_message = "Authentication error"
    default_status = 400

    def __init__(self, message: str | None = None, status_code: int | None = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status


class InvalidCredentials(AuthException):
    kind = AuthErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"
    default_status = 401


class EmailAlreadyRegistered(AuthException):
    kind = AuthErrorKind.EMAIL_ALREADY_REGISTERED
    default_message = "Email already registered"
    default_status = 409


class EmailNotVerified(AuthException):
    kind = AuthErrorKind.EMAIL_NOT_VERIFIED
    default_message = "Email not verified. Check your inbox."
    default_status = 403


class TokenExpired(AuthException):
    kind = AuthErrorKind.TOKEN_EXPIRED
    default_message = "Token expired"
    default_status = 401


class TokenInvalid(AuthException):
    kind = AuthErrorKind.TOKEN_INVALID
    default_message = "Invalid token"
    default_status = 401


class TokenRevoked(AuthException):
    kind = AuthErrorKind.TOKEN_REVOKED
    default_message = "Token revoked"
    default_status = 401


class TokenNotFound(AuthException):
    kind = AuthErrorKind.TOKEN_NOT_FOUND
    default_message = "Token not found or expired"
    default_status = 404


class SessionNotFound(AuthException):
    kind = AuthErrorKind.SESSION_NOT_FOUND
    default_message = "Session not found"
    default_status = 404


class AccountNotFound(AuthException):
    kind = AuthErrorKind.ACCOUNT_NOT_FOUND
    default_message = "User not found"
    default_status = 404


class WeakPassword(AuthException):
    """Raised with every violated strength rule, not just the first."""

    kind = AuthErrorKind.WEAK_PASSWORD
    default_message = "Password does not meet strength requirements"
    default_status = 400

    def __init__(self, violations: list[str], message: str | None = None):
        super().__init__(message)
        self.violations = list(violations)
