"""Port battle and signup models."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from web.models.base import Base, utcnow

SIGNUP_STATUSES = ("pending", "approved", "rejected")


class PortBattle(Base):
    """Scheduled port battle."""

    __tablename__ = "port_battles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    port_name: Mapped[str] = mapped_column(String(64), nullable=False)
    scheduled_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    signups = relationship("PortBattleSignup", back_populates="port_battle", cascade="all, delete-orphan")


class PortBattleSignup(Base):
    """A user's signup for a port battle."""

    __tablename__ = "port_battle_signups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    port_battle_id: Mapped[int] = mapped_column(ForeignKey("port_battles.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # pending, approved, rejected
    fleet_role: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="signups")
    port_battle: Mapped["PortBattle"] = relationship("PortBattle", back_populates="signups")
