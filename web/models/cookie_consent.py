"""Cookie consent log. Append-only."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from web.models.base import Base, utcnow


class CookieConsent(Base):
    """One row per consent action from a visitor."""

    __tablename__ = "cookie_consents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[str] = mapped_column(Text, nullable=False)
    accepted: Mapped[bool] = mapped_column(Boolean, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)  # client-reported
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
