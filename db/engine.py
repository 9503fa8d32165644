"""
SQLAlchemy engine and session factory.

Engines are built explicitly at startup and handed to the stores that need
them; nothing connects at import time.

Usage:
    from db.engine import create_db_engine, create_session_factory

    engine = create_db_engine(Config.DATABASE_URL)
    SessionLocal = create_session_factory(engine)

    with SessionLocal() as db:
        account = db.query(Account).first()
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


# Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with connection pooling suited to the URL."""
    if database_url.startswith("sqlite"):
        # In-memory SQLite must share a single connection across sessions.
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before use
        pool_size=10,
        max_overflow=20,
        pool_timeout=10,
        echo=echo,  # Set to True for SQL debugging
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def create_schema(engine: Engine) -> None:
    """Create all tables. Production schemas are managed by Alembic."""
    import db.models  # noqa: F401  (register models on Base.metadata)

    Base.metadata.create_all(engine)
