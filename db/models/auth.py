"""
Auth models for session tracking and login auditing.

RefreshToken: one row per issued refresh token (never deleted, only revoked)
LoginHistory: append-only login attempts
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
)
from sqlalchemy.orm import relationship

from db.engine import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshToken(Base):
    """
    Durable record of an issued refresh token.

    The token value itself is stored so that it can be looked up and revoked.
    """
    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    token = Column(Text, unique=True, nullable=False)
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    revoked = Column(Boolean, nullable=False, default=False)
    device_info = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    expires_at = Column(Integer, nullable=False, index=True)  # Unix timestamp

    # Relationship
    account = relationship("Account", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken(id={self.id}, user_id={self.user_id}, revoked={self.revoked})>"


class LoginHistory(Base):
    """
    A single login attempt. Rows are never updated.
    """
    __tablename__ = "login_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=True, index=True)
    ip_address = Column(String(64), nullable=False, default="unknown")
    user_agent = Column(Text, nullable=True)
    success = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    # Relationship
    account = relationship("Account", back_populates="login_history")

    def __repr__(self):
        return f"<LoginHistory(user_id={self.user_id}, success={self.success})>"
