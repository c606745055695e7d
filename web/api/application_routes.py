"""Membership application cooldowns (admin)."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from web.api.utils import isoformat
from web.auth import require_admin
from web.errors import NotFound, PersistenceFailed
from web.models import ApplicationCooldown, get_session
from web.models.base import utcnow
from web.session import Identity

logger = logging.getLogger("kraken.api")

router = APIRouter(prefix="/api/applications", tags=["applications"])


class CooldownOverrideRequest(BaseModel):
    discordId: str = Field(min_length=1)


def _cooldown_json(c: ApplicationCooldown) -> dict:
    return {
        "discordId": c.discord_id,
        "canReapplyAt": isoformat(c.can_reapply_at),
        "overriddenBy": c.overridden_by,
        "overriddenAt": isoformat(c.overridden_at),
    }


@router.get("/cooldowns")
async def list_cooldowns(
    admin: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Active cooldowns, soonest expiry first (admin only)."""
    try:
        result = await session.execute(
            select(ApplicationCooldown)
            .where(ApplicationCooldown.can_reapply_at > utcnow())
            .order_by(ApplicationCooldown.can_reapply_at)
        )
        cooldowns = result.scalars().all()
    except SQLAlchemyError as e:
        logger.exception("Error fetching cooldowns")
        raise PersistenceFailed("Failed to fetch cooldowns") from e
    return {"cooldowns": [_cooldown_json(c) for c in cooldowns]}


@router.post("/cooldowns/override")
async def override_cooldown(
    body: CooldownOverrideRequest,
    admin: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Let an applicant reapply immediately (admin only)."""
    try:
        result = await session.execute(
            select(ApplicationCooldown).where(ApplicationCooldown.discord_id == body.discordId)
        )
        cooldown = result.scalar_one_or_none()
        if not cooldown:
            raise NotFound("Cooldown not found")
        now = utcnow()
        cooldown.can_reapply_at = now
        cooldown.overridden_by = admin.email
        cooldown.overridden_at = now
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error overriding cooldown for %s", body.discordId)
        raise PersistenceFailed("Failed to override cooldown") from e
    logger.info("Cooldown for %s overridden by %s", body.discordId, admin.email)
    return {"success": True, "message": "Cooldown override successful"}
