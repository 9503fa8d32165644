"""
FastAPI application for the identity service.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.users import router as users_router
from auth.dependencies import AuthContainer
from config import Config

logger = logging.getLogger(__name__)


def create_app(container: AuthContainer | None = None) -> FastAPI:
    """Build the app. Stores are opened on startup, not at import."""
    external = container is not None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown."""
        auth_container = app.state.auth
        if not external:
            Config.validate(auth_container.config)
        logger.info("Starting up application...")
        auth_container.startup()
        yield
        logger.info("Shutting down application...")
        await auth_container.shutdown()

    app = FastAPI(
        title="Identity API",
        description="Token issuance, refresh and revocation",
        lifespan=lifespan,
    )
    app.state.auth = container or AuthContainer(
        database_url=Config.DATABASE_URL,
        redis_url=Config.REDIS_URL,
        redis_socket_timeout=Config.REDIS_SOCKET_TIMEOUT,
        db_echo=Config.DB_ECHO,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/v1/users", tags=["users"])

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
