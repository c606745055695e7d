"""Per-user API routes: stats and port battle signups."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from web.api.utils import isoformat
from web.auth import require_identity
from web.errors import PersistenceFailed
from web.models import PortBattle, PortBattleSignup, get_session
from web.models.base import utcnow
from web.session import Identity

logger = logging.getLogger("kraken.api")

router = APIRouter(prefix="/api/user", tags=["user"])


class UserStats(BaseModel):
    totalSignups: int = 0
    upcomingBattles: int = 0
    completedBattles: int = 0
    pendingSignups: int = 0


async def aggregate_user_stats(session: AsyncSession, user_id: int) -> UserStats:
    """Counts over the user's signups.

    upcomingBattles: battle in the future and signup not rejected.
    completedBattles: battle already started and signup approved.
    """
    now = utcnow()
    result = await session.execute(
        select(
            func.count(PortBattleSignup.id),
            func.sum(case(
                ((PortBattle.scheduled_time > now) & (PortBattleSignup.status != "rejected"), 1),
                else_=0,
            )),
            func.sum(case(
                ((PortBattle.scheduled_time <= now) & (PortBattleSignup.status == "approved"), 1),
                else_=0,
            )),
            func.sum(case((PortBattleSignup.status == "pending", 1), else_=0)),
        )
        .join(PortBattle, PortBattle.id == PortBattleSignup.port_battle_id)
        .where(PortBattleSignup.user_id == user_id)
    )
    total, upcoming, completed, pending = result.one()
    # SUM over zero rows is NULL
    return UserStats(
        totalSignups=total or 0,
        upcomingBattles=upcoming or 0,
        completedBattles=completed or 0,
        pendingSignups=pending or 0,
    )


@router.get("/stats")
async def get_user_stats(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Signup and battle counts for the current user."""
    try:
        stats = await aggregate_user_stats(session, identity.id)
    except SQLAlchemyError as e:
        logger.exception("Error fetching stats for user %s", identity.id)
        raise PersistenceFailed() from e
    return {"stats": stats.model_dump()}


@router.get("/signups")
async def get_user_signups(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Current user's port battle signups, latest battle first."""
    try:
        result = await session.execute(
            select(PortBattleSignup)
            .join(PortBattle, PortBattle.id == PortBattleSignup.port_battle_id)
            .where(PortBattleSignup.user_id == identity.id)
            .order_by(PortBattle.scheduled_time.desc(), PortBattleSignup.id)
            .options(selectinload(PortBattleSignup.port_battle))
        )
        signups = result.scalars().all()
    except SQLAlchemyError as e:
        logger.exception("Error fetching signups for user %s", identity.id)
        raise PersistenceFailed() from e
    return {
        "signups": [
            {
                "id": s.id,
                "status": s.status,
                "fleetRole": s.fleet_role,
                "portBattle": {
                    "id": s.port_battle.id,
                    "title": s.port_battle.title,
                    "scheduledTime": isoformat(s.port_battle.scheduled_time),
                    "port": {"name": s.port_battle.port_name},
                },
            }
            for s in signups
        ]
    }
