"""
Database module for the identity service.

Provides SQLAlchemy models and engine helpers for the durable auth store.
"""

from db.engine import Base, create_db_engine, create_schema, create_session_factory

__all__ = ["Base", "create_db_engine", "create_schema", "create_session_factory"]
