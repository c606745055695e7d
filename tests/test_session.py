"""Tests for session resolution."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from web.models import User
from web.session import create_session_token, decode_session_token


def _token(payload: dict, secret: str | None = None) -> str:
    return jwt.encode(payload, secret or config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


@pytest.mark.asyncio
async def test_token_round_trip_claims(member):
    payload = decode_session_token(create_session_token(member, access_token="discord-abc"))
    assert payload["sub"] == str(member.id)
    assert payload["email"] == member.email
    assert payload["access_token"] == "discord-abc"


def test_garbage_token_decodes_to_none():
    assert decode_session_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_no_token_is_anonymous(client):
    r = await client.get("/api/debug/session")
    assert r.status_code == 200
    assert r.json()["session"] is None


@pytest.mark.asyncio
async def test_bearer_token_resolves(client, member, member_headers):
    r = await client.get("/api/debug/session", headers=member_headers)
    assert r.status_code == 200
    user = r.json()["session"]["user"]
    assert user == {"id": member.id, "email": member.email, "username": "sailor", "role": "member"}


@pytest.mark.asyncio
async def test_x_auth_token_header_resolves(client, member):
    token = create_session_token(member)
    r = await client.get("/api/debug/session", headers={"X-Auth-Token": token})
    assert r.json()["session"]["user"]["id"] == member.id


@pytest.mark.asyncio
async def test_cookie_resolves(client, member):
    cookie = f"{config.SESSION_COOKIE_NAME}={create_session_token(member)}"
    r = await client.get("/api/debug/session", headers={"Cookie": cookie})
    assert r.json()["session"]["user"]["id"] == member.id


@pytest.mark.asyncio
async def test_expired_token_is_anonymous(client, member):
    expired = _token({"sub": str(member.id), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)})
    r = await client.get("/api/debug/session", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 200
    assert r.json()["session"] is None


@pytest.mark.asyncio
async def test_wrong_signature_is_anonymous(client, member):
    forged = _token({"sub": str(member.id), "role": "admin"}, secret="another-secret-of-sufficient-length!!")
    r = await client.get("/api/user/stats", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_deleted_user_is_anonymous(client):
    token = _token({"sub": "9999", "exp": datetime.now(timezone.utc) + timedelta(days=1)})
    r = await client.get("/api/debug/session", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["session"] is None


@pytest.mark.asyncio
async def test_role_read_from_database_not_token(client, db, make_user, auth_for):
    """A role change applies to tokens minted before it."""
    user = await make_user("promoted@krakengaming.org", role="member")
    headers = auth_for(user)
    async with db.session_factory() as session:
        row = await session.get(User, user.id)
        row.role = "admin"
        await session.commit()
    r = await client.get("/api/debug/session-info", headers=headers)
    assert r.json()["role"] == "admin"


@pytest.mark.asyncio
async def test_admin_email_allow_list(client, member, member_headers, monkeypatch):
    monkeypatch.setattr(config, "ADMIN_EMAILS", {member.email})
    r = await client.get("/api/debug/session-info", headers=member_headers)
    assert r.json()["role"] == "admin"


@pytest.mark.asyncio
async def test_lookup_failure_is_401(client, member_headers, monkeypatch):
    """A database failure while resolving the session surfaces as 401, not a crash."""

    async def broken_get(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(AsyncSession, "get", broken_get)
    r = await client.get("/api/user/stats", headers=member_headers)
    assert r.status_code == 401
    assert r.json() == {"error": "Failed to resolve session"}
