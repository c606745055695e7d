"""Shared API utilities."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import Request


def client_ip(request: Request) -> str:
    """First X-Forwarded-For entry, else X-Real-IP, else "unknown"."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("x-real-ip") or "unknown"


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialize a stored naive-UTC datetime as ISO 8601 with a Z suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_email(value: str) -> str:
    """Trim and lowercase. Raises ValueError (a 400 via pydantic) if it cannot be an address."""
    value = value.strip().lower()
    local, sep, domain = value.partition("@")
    if not sep or not local or not domain:
        raise ValueError("Invalid email address")
    return value
