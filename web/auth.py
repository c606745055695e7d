"""Authentication for web API: password hashing and the role authorization gate."""
from __future__ import annotations

import enum
import hashlib
from typing import Callable

from fastapi import Depends
from passlib.context import CryptContext

from web.errors import AuthorizationDenied, AuthResolutionFailed
from web.models.user import ROLES
from web.session import Identity, Resolved, get_identity

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_ROLE_RANK = {name: rank for rank, name in enumerate(ROLES)}


def _prepare_password(password: str) -> str:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return hashlib.sha256(encoded).hexdigest()
    return password


def hash_password(password: str) -> str:
    return pwd_context.hash(_prepare_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(_prepare_password(plain), hashed)


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"  # authenticated, role too low -> 403
    UNAUTHENTICATED = "unauthenticated"  # no session -> 401


def role_satisfies(role: str, required_role: str) -> bool:
    """True if `role` ranks at or above `required_role`. Unknown roles satisfy nothing."""
    if role not in _ROLE_RANK:
        return False
    return _ROLE_RANK[role] >= _ROLE_RANK[required_role]


def authorize(identity: Resolved, required_role: str) -> Decision:
    """Gate decision for one identity and one required role."""
    if required_role not in _ROLE_RANK:
        raise ValueError(f"Unknown role: {required_role}")
    if not isinstance(identity, Identity):
        return Decision.UNAUTHENTICATED
    if role_satisfies(identity.role, required_role):
        return Decision.ALLOW
    return Decision.DENY


def require_role(required_role: str) -> Callable:
    """Dependency factory applied to every privileged route. Raises 401 or 403."""
    if required_role not in _ROLE_RANK:
        raise ValueError(f"Unknown role: {required_role}")

    async def dependency(identity: Resolved = Depends(get_identity)) -> Identity:
        decision = authorize(identity, required_role)
        if decision is Decision.UNAUTHENTICATED:
            raise AuthResolutionFailed()
        if decision is Decision.DENY:
            raise AuthorizationDenied(f"{required_role.capitalize()} access required")
        return identity

    dependency.__name__ = f"require_{required_role}"
    return dependency


require_identity = require_role("member")
require_admin = require_role("admin")
