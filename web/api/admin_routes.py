"""Admin API routes: role management."""
from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from web.api.utils import normalize_email
from web.auth import require_admin
from web.errors import NotFound, PersistenceFailed
from web.models import User, get_session
from web.session import Identity

logger = logging.getLogger("kraken.api")

router = APIRouter(prefix="/api/admin", tags=["admin"])


class UpdateRoleRequest(BaseModel):
    email: str
    role: Literal["member", "moderator", "admin"]

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


@router.post("/update-role")
async def update_role(
    body: UpdateRoleRequest,
    admin: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Set a user's role by email (admin only)."""
    try:
        result = await session.execute(select(User).where(User.email == body.email))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFound("User not found")
        previous = user.role
        user.role = body.role
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error updating role for %s", body.email)
        raise PersistenceFailed("Failed to update user role") from e
    logger.info("Role for %s changed %s -> %s by %s", user.email, previous, user.role, admin.email)
    return {
        "message": "User role updated successfully",
        "user": user.to_public_dict(),
    }
