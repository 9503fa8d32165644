"""
Account model.

Identity record: unique email (stored exactly as registered), password hash
and the one-way email verification flag.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from db.engine import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """User account for authentication."""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    hashed_password = Column(Text, nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    refresh_tokens = relationship("RefreshToken", back_populates="account")
    login_history = relationship("LoginHistory", back_populates="account")

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email})>"
