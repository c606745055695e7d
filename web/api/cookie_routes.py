"""Cookie consent logging (public)."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, StrictBool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from web.api.utils import client_ip
from web.errors import PersistenceFailed
from web.models import CookieConsent, get_session
from web.models.base import as_naive_utc, utcnow

logger = logging.getLogger("kraken.api")

router = APIRouter(prefix="/api/cookies", tags=["cookies"])


class CookieConsentRequest(BaseModel):
    accepted: StrictBool
    timestamp: Optional[datetime] = None  # ISO string or epoch; server time when omitted


@router.post("/accept")
async def accept_cookies(
    body: CookieConsentRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    """Record one consent decision. Every call appends a new row."""
    consent = CookieConsent(
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent") or "unknown",
        accepted=body.accepted,
        timestamp=as_naive_utc(body.timestamp) if body.timestamp else utcnow(),
    )
    try:
        session.add(consent)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error storing cookie consent")
        raise PersistenceFailed("Failed to store cookie consent") from e
    logger.info("Cookie consent recorded (accepted=%s)", consent.accepted)
    return {"success": True}
