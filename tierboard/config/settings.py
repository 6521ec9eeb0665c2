"""
Settings

Centralized configuration for the tierboard backend.
All values are loaded from environment variables (a local .env is honoured).
"""
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE)


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable, falling back on bad input."""
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_list_env(key: str) -> List[str]:
    """Get a comma-separated list from environment variable."""
    return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]


class Settings:
    """
    Application settings.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from an environment variable
    3. Read it through `settings`
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./tierboard.db")
    DATABASE_ECHO: bool = get_bool_env("DATABASE_ECHO", False)

    # Admin sessions
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = get_int_env("ADMIN_TOKEN_EXPIRE_MINUTES", 12 * 60)
    ONBOARDING_TOKEN_EXPIRE_MINUTES: int = get_int_env("ONBOARDING_TOKEN_EXPIRE_MINUTES", 30)

    # Seeded into auth_config (hashed) when absent
    OWNER_PASSWORD: str = os.getenv("OWNER_PASSWORD", "")
    GENERAL_PASSWORD: str = os.getenv("GENERAL_PASSWORD", "")

    # Staff logins must come from the address the application was filed from
    ADMIN_ENFORCE_IP: bool = get_bool_env("ADMIN_ENFORCE_IP", True)
    # Only enable behind a proxy that sets X-Forwarded-For itself
    TRUST_FORWARDED_FOR: bool = get_bool_env("TRUST_FORWARDED_FOR", False)

    # Leaderboard paging
    LEADERBOARD_PAGE_SIZE: int = get_int_env("LEADERBOARD_PAGE_SIZE", 50)
    LEADERBOARD_MAX_PAGE_SIZE: int = get_int_env("LEADERBOARD_MAX_PAGE_SIZE", 200)
    SEARCH_LIMIT: int = get_int_env("SEARCH_LIMIT", 20)
    TIER_GRID_PAGE_SIZE: int = get_int_env("TIER_GRID_PAGE_SIZE", 10)

    # Rate limiting (slowapi, per client address)
    RATE_LIMIT_ENABLED: bool = get_bool_env("RATE_LIMIT_ENABLED", True)
    LOGIN_RATE_LIMIT: str = os.getenv("LOGIN_RATE_LIMIT", "30/minute")
    APPLICATION_RATE_LIMIT: str = os.getenv("APPLICATION_RATE_LIMIT", "5/minute")

    # CORS
    ALLOWED_ORIGINS: List[str] = get_list_env("ALLOWED_ORIGINS")

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"

    @classmethod
    def summary(cls) -> dict:
        """Non-secret configuration, safe to expose to staff."""
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "database_backend": cls.DATABASE_URL.split(":", 1)[0],
            "admin_token_expire_minutes": cls.ADMIN_TOKEN_EXPIRE_MINUTES,
            "admin_enforce_ip": cls.ADMIN_ENFORCE_IP,
            "leaderboard_page_size": cls.LEADERBOARD_PAGE_SIZE,
            "search_limit": cls.SEARCH_LIMIT,
            "tier_grid_page_size": cls.TIER_GRID_PAGE_SIZE,
            "owner_password_configured": bool(cls.OWNER_PASSWORD),
            "general_password_configured": bool(cls.GENERAL_PASSWORD),
        }


settings = Settings
