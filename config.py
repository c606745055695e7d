"""Configuration for the KrakenGaming site API and Discord bot."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Runtime environment: development, preview, production
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").strip().lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "")
BOT_HEALTH_PORT = int(os.getenv("BOT_HEALTH_PORT", os.getenv("PORT", "8080")))
BOT_VERSION = os.getenv("BOT_VERSION", "1.0.0")
SITE_URL = os.getenv("SITE_URL", "https://krakengaming.org")

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'kraken.db'}",
)


def _parse_csv(value: str) -> list[str]:
    if not value:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


CORS_ALLOWED_ORIGINS = _parse_csv(os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000"))

# Emails always treated as admin, regardless of the stored role (case-insensitive)
ADMIN_EMAILS = {x.lower() for x in _parse_csv(os.getenv("ADMIN_EMAILS", ""))}

# Web sessions (JWT secret, cookie, initial admin bootstrap)
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-long-random-string")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "kraken_session")
INITIAL_ADMIN_EMAIL = os.getenv("INITIAL_ADMIN_EMAIL", "admin@krakengaming.org")
INITIAL_ADMIN_USERNAME = os.getenv("INITIAL_ADMIN_USERNAME", "admin")
INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")  # Set to bootstrap first admin


def is_production() -> bool:
    return ENVIRONMENT == "production"
