"""
Configuration management for the application.
"""

import os

from auth.config import AuthConfig  # noqa: F401  (loads .env before the reads below)


class Config:
    """Application configuration."""

    # Durable store (PostgreSQL in production)
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    DB_ECHO: bool = os.getenv("DB_ECHO", "false").strip().lower() in {"1", "true", "yes", "on"}

    # TTL store for revocation entries and single-use tokens
    REDIS_URL: str | None = os.getenv("REDIS_URL")
    REDIS_SOCKET_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))

    # API configuration
    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls, auth_config: AuthConfig | None = None) -> None:
        """Validate required configuration."""
        auth_config = auth_config or AuthConfig()
        auth_config.validate()
        if auth_config.AUTH_STORE == "postgres" and not cls.DATABASE_URL:
            raise ValueError(
                "DATABASE_URL not set. Please set it in .env file or environment variable,\n"
                "or use AUTH_STORE=memory for local development."
            )
        if auth_config.EPHEMERAL_STORE == "redis" and not cls.REDIS_URL:
            raise ValueError(
                "REDIS_URL not set. Please set it in .env file or environment variable,\n"
                "or use EPHEMERAL_STORE=memory for local development."
            )
