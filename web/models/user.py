"""Site user model."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from web.models.base import Base, utcnow

# Ordered lowest to highest privilege
ROLES = ("member", "moderator", "admin")
DEFAULT_ROLE = "member"


class User(Base):
    """Site account with a single role."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_ROLE)  # member, moderator, admin
    discord_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    signups = relationship("PortBattleSignup", back_populates="user", cascade="all, delete-orphan")

    def to_public_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "username": self.username, "role": self.role}
