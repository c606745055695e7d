"""Session resolution: request -> Identity or ANONYMOUS.

A session is a signed JWT carried in the Authorization header, the
X-Auth-Token header (fallback for proxies that strip Authorization) or the
session cookie. A missing or unreadable token is not an error, it resolves to
ANONYMOUS. Only a failing user lookup raises AuthResolutionFailed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from web.errors import AuthResolutionFailed
from web.models import User, get_session

logger = logging.getLogger("kraken.auth")


@dataclass(frozen=True)
class Identity:
    """Authenticated principal for one request."""

    id: int
    email: str
    username: str
    role: str
    access_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "user": {
                "id": self.id,
                "email": self.email,
                "username": self.username,
                "role": self.role,
            },
            "accessToken": self.access_token,
            "expires": self.expires_at.isoformat() if self.expires_at else None,
        }


class Anonymous:
    """No session. Falsy so handlers can write `if not identity`."""

    _instance: Optional["Anonymous"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ANONYMOUS"


ANONYMOUS = Anonymous()

Resolved = Union[Identity, Anonymous]


def create_session_token(user: User, access_token: Optional[str] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=config.JWT_EXPIRE_DAYS)
    payload = {"sub": str(user.id), "email": user.email, "role": user.role, "exp": expire}
    if access_token:
        payload["access_token"] = access_token
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def extract_token(request: Request) -> Optional[str]:
    """Bearer header first, then X-Auth-Token, then the session cookie."""
    auth = request.headers.get("Authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    x_auth_token = request.headers.get("X-Auth-Token")
    if x_auth_token:
        return x_auth_token
    return request.cookies.get(config.SESSION_COOKIE_NAME) or None


def effective_role(user: User) -> str:
    if user.email and user.email.lower() in config.ADMIN_EMAILS:
        return "admin"
    return user.role


async def resolve(request: Request, session: AsyncSession) -> Resolved:
    """Resolve the request's session to an Identity, or ANONYMOUS."""
    token = extract_token(request)
    if not token:
        return ANONYMOUS
    payload = decode_session_token(token)
    if not payload:
        return ANONYMOUS
    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        return ANONYMOUS
    try:
        user = await session.get(User, user_id)
    except SQLAlchemyError as e:
        logger.exception("Session lookup failed for user %s", user_id)
        raise AuthResolutionFailed("Failed to resolve session") from e
    if not user:
        return ANONYMOUS
    exp = payload.get("exp")
    return Identity(
        id=user.id,
        email=user.email,
        username=user.username,
        # Role comes from the database so a role change applies on the next request
        role=effective_role(user),
        access_token=payload.get("access_token"),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )


async def get_identity(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Resolved:
    """Dependency: current Identity or ANONYMOUS."""
    return await resolve(request, session)
