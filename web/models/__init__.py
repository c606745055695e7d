"""Database models."""
from web.models.base import Base, Database, get_session
from web.models.user import User
from web.models.cookie_consent import CookieConsent
from web.models.port_battle import PortBattle, PortBattleSignup
from web.models.application_cooldown import ApplicationCooldown  # noqa: F401 - for metadata

__all__ = [
    "Base",
    "Database",
    "User",
    "CookieConsent",
    "PortBattle",
    "PortBattleSignup",
    "ApplicationCooldown",
    "get_session",
]
