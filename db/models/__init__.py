"""
SQLAlchemy models for the identity service.

All models inherit from db.engine.Base for Alembic migrations.
"""

from db.models.account import Account
from db.models.auth import LoginHistory, RefreshToken

__all__ = [
    # Accounts
    "Account",
    # Auth
    "RefreshToken",
    "LoginHistory",
]
