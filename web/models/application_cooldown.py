"""Membership application cooldown model."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from web.models.base import Base


class ApplicationCooldown(Base):
    """Earliest time a rejected applicant (by Discord ID) may apply again."""

    __tablename__ = "application_cooldowns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    discord_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    can_reapply_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    overridden_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    overridden_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
