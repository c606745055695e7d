"""Session introspection for local development. 404 in production."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

import config
from web.errors import NotFound
from web.session import Identity, Resolved, get_identity

logger = logging.getLogger("kraken.api")


async def require_dev_environment() -> None:
    if config.is_production():
        raise NotFound()


router = APIRouter(
    prefix="/api/debug",
    tags=["debug"],
    dependencies=[Depends(require_dev_environment)],
)


def _session_json(identity: Resolved) -> dict | None:
    return identity.to_dict() if isinstance(identity, Identity) else None


@router.get("/session")
async def debug_session(identity: Resolved = Depends(get_identity)):
    """Resolved session as-is, with server time."""
    return {
        "session": _session_json(identity),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@router.get("/session-info")
async def debug_session_info(identity: Resolved = Depends(get_identity)):
    """Resolved session plus its user and role."""
    session = _session_json(identity)
    logger.debug("Debug session: %s", session["user"] if session else None)
    return {
        "session": session,
        "user": session["user"] if session else None,
        "role": identity.role if isinstance(identity, Identity) else None,
    }
