"""Auth dependency helpers."""

from __future__ import annotations

import logging

from fastapi import Cookie, Depends, Header, HTTPException, Request, Response

from auth.config import AuthConfig
from auth.exceptions import AuthException
from auth.interfaces.rate_limiter import RateLimiter
from auth.services.auth_service import AuthService
from auth.services.email_service import EmailService
from auth.stores.memory_store import (
    MemoryEphemeralStore,
    MemoryLoginHistoryStore,
    MemoryRateLimiter,
    MemorySessionStore,
    MemoryUserStore,
)

logger = logging.getLogger(__name__)


class AuthContainer:
    """Owns the store handles the auth service runs on.

    Built once per process: ``startup()`` opens the durable and TTL stores
    selected by ``AUTH_STORE`` / ``EPHEMERAL_STORE``, ``shutdown()`` releases
    them.
    """

    def __init__(
        self,
        config: AuthConfig | None = None,
        database_url: str | None = None,
        redis_url: str | None = None,
        redis_socket_timeout: float = 5.0,
        db_echo: bool = False,
        notifier=None,
    ) -> None:
        self.config = config or AuthConfig()
        self._database_url = database_url
        self._redis_url = redis_url
        self._redis_socket_timeout = redis_socket_timeout
        self._db_echo = db_echo
        self._notifier = notifier
        self._engine = None
        self._redis_store = None
        self.rate_limiter: RateLimiter = MemoryRateLimiter()
        self.service: AuthService | None = None

    def startup(self) -> None:
        self.config.validate()
        users, sessions, history = self._open_durable_stores()
        ephemeral = self._open_ephemeral_store()
        self.service = AuthService(
            user_store=users,
            session_store=sessions,
            login_history_store=history,
            ephemeral_store=ephemeral,
            notifier=self._notifier or EmailService(self.config),
            config=self.config,
        )
        logger.info(
            "Auth stores ready (durable=%s, ephemeral=%s)",
            self.config.AUTH_STORE,
            self.config.EPHEMERAL_STORE,
        )

    async def shutdown(self) -> None:
        if self._redis_store is not None:
            await self._redis_store.close()
            self._redis_store = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")
        self.service = None

    def _open_durable_stores(self):
        if self.config.AUTH_STORE == "postgres":
            from auth.stores.postgres_store import (
                PostgresLoginHistoryStore,
                PostgresSessionStore,
                PostgresUserStore,
            )
            from db.engine import create_db_engine, create_session_factory

            if not self._database_url:
                raise ValueError("DATABASE_URL is required when AUTH_STORE=postgres")
            self._engine = create_db_engine(self._database_url, echo=self._db_echo)
            session_factory = create_session_factory(self._engine)
            return (
                PostgresUserStore(session_factory),
                PostgresSessionStore(session_factory),
                PostgresLoginHistoryStore(session_factory),
            )
        # Memory stores for development/testing
        return MemoryUserStore(), MemorySessionStore(), MemoryLoginHistoryStore()

    def _open_ephemeral_store(self):
        if self.config.EPHEMERAL_STORE == "redis":
            from auth.stores.redis_store import RedisEphemeralStore

            if not self._redis_url:
                raise ValueError("REDIS_URL is required when EPHEMERAL_STORE=redis")
            self._redis_store = RedisEphemeralStore(
                self._redis_url,
                socket_timeout=self._redis_socket_timeout,
            )
            self._redis_store.verify_connection()
            return self._redis_store
        return MemoryEphemeralStore()


def get_container(request: Request) -> AuthContainer:
    return request.app.state.auth


def get_auth_config(container: AuthContainer = Depends(get_container)) -> AuthConfig:
    return container.config


def get_auth_service(container: AuthContainer = Depends(get_container)) -> AuthService:
    if container.service is None:
        raise HTTPException(status_code=503, detail="Auth service not started")
    return container.service


def get_rate_limiter(container: AuthContainer = Depends(get_container)) -> RateLimiter:
    return container.rate_limiter


def raise_http(exc: AuthException) -> None:
    """Map an auth failure onto the HTTP error the client sees."""
    raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def _enforce(request: Request, limiter: RateLimiter, scope: str, limit: int, window: int, detail: str) -> None:
    key = f"{scope}:{_client_ip(request)}"
    if not await limiter.allow(key, limit, window):
        raise HTTPException(status_code=429, detail=detail)


async def enforce_login_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    config: AuthConfig = Depends(get_auth_config),
) -> None:
    await _enforce(request, limiter, "login", config.LOGIN_RATE_LIMIT_PER_MINUTE, 60, "Too many login attempts")


async def enforce_register_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    config: AuthConfig = Depends(get_auth_config),
) -> None:
    await _enforce(request, limiter, "register", config.REGISTER_RATE_LIMIT_PER_HOUR, 3600, "Too many registrations")


async def enforce_email_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    config: AuthConfig = Depends(get_auth_config),
) -> None:
    await _enforce(request, limiter, "email", config.EMAIL_RATE_LIMIT_PER_HOUR, 3600, "Too many requests")


async def get_current_user(
    authorization: str | None = Header(default=None),
    access_token: str | None = Cookie(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> dict:
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):]
    elif access_token:
        token = access_token
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return await auth_service.authenticate(token)
    except AuthException as exc:
        raise_http(exc)


def is_mobile_client(request: Request, config: AuthConfig) -> bool:
    return request.headers.get(config.CLIENT_TYPE_HEADER, "").lower() == "mobile"


def set_cookie(
    response: Response,
    config: AuthConfig,
    key: str,
    value: str,
    max_age: int | None = None,
) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        httponly=config.COOKIE_HTTP_ONLY,
        secure=config.COOKIE_SECURE,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )
