"""Auth API routes: register, login, logout, current user."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from web.api.utils import normalize_email
from web.auth import hash_password, require_identity, verify_password
from web.errors import AuthResolutionFailed, Conflict, PersistenceFailed, ValidationFailed
from web.models import User, get_session
from web.session import Identity, create_session_token

logger = logging.getLogger("kraken.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8


class RegisterRequest(BaseModel):
    email: str
    username: str = Field(min_length=1, max_length=64)
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    emailOrUsername: str
    password: str


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        token,
        max_age=config.JWT_EXPIRE_DAYS * 24 * 3600,
        httponly=True,
        samesite="lax",
        secure=config.is_production(),
    )


async def _find_login_user(session: AsyncSession, login: str) -> User | None:
    """Email first, then username."""
    result = await session.execute(select(User).where(User.email == login.strip().lower()))
    user = result.scalar_one_or_none()
    if user:
        return user
    result = await session.execute(select(User).where(User.username == login.strip()))
    return result.scalar_one_or_none()


def _is_reserved(email: str, username: str) -> str | None:
    """Name the field that collides with an admin identity from config, if any."""
    if email in config.ADMIN_EMAILS or email == config.INITIAL_ADMIN_EMAIL.lower():
        return "Email"
    if username.lower() == config.INITIAL_ADMIN_USERNAME.lower():
        return "Username"
    return None


async def _bootstrap_admin(session: AsyncSession, body: LoginRequest) -> User | None:
    """Create the initial admin if INITIAL_ADMIN_PASSWORD is set and matches."""
    if not config.INITIAL_ADMIN_PASSWORD or body.password != config.INITIAL_ADMIN_PASSWORD:
        return None
    login = body.emailOrUsername.strip()
    if login != config.INITIAL_ADMIN_USERNAME and login.lower() != config.INITIAL_ADMIN_EMAIL.lower():
        return None
    result = await session.execute(
        select(User).where(
            or_(
                User.email == config.INITIAL_ADMIN_EMAIL.lower(),
                User.username == config.INITIAL_ADMIN_USERNAME,
            )
        )
    )
    if result.scalars().first():
        logger.warning("Initial admin bootstrap skipped: email or username already taken")
        return None
    user = User(
        email=config.INITIAL_ADMIN_EMAIL.lower(),
        username=config.INITIAL_ADMIN_USERNAME,
        password_hash=hash_password(config.INITIAL_ADMIN_PASSWORD),
        role="admin",
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Bootstrapped initial admin %s", user.email)
    return user


@router.post("/register")
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Create a member account."""
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    reserved = _is_reserved(body.email, body.username)
    if reserved:
        logger.warning("Refused registration of reserved %s %s", reserved.lower(), body.email)
        raise Conflict(f"{reserved} already exists")
    try:
        result = await session.execute(
            select(User).where(or_(User.email == body.email, User.username == body.username))
        )
        existing = result.scalars().first()
        if existing:
            raise Conflict("Email already exists" if existing.email == body.email else "Username already exists")
        user = User(
            email=body.email,
            username=body.username,
            password_hash=hash_password(body.password),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error registering %s", body.email)
        raise PersistenceFailed("Failed to create user") from e
    logger.info("Registered user %s (id %s)", user.email, user.id)
    return {"message": "User created successfully", "user": user.to_public_dict()}


@router.post("/login")
async def login(body: LoginRequest, response: Response, session: AsyncSession = Depends(get_session)):
    """Authenticate and return a session token (also set as a cookie)."""
    try:
        user = await _find_login_user(session, body.emailOrUsername)
        if not user:
            user = await _bootstrap_admin(session, body)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error during login")
        raise PersistenceFailed() from e
    if not user or not verify_password(body.password, user.password_hash):
        raise AuthResolutionFailed("Invalid email/username or password")
    token = create_session_token(user)
    _set_session_cookie(response, token)
    return {"access_token": token, "token_type": "bearer", "user": user.to_public_dict()}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/me")
async def get_me(identity: Identity = Depends(require_identity)):
    """Get current authenticated user."""
    return {
        "user": {"id": identity.id, "email": identity.email, "username": identity.username, "role": identity.role}
    }
