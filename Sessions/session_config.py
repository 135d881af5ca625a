"""
SESSION CONFIG
==============
Centralized session settings loaded from environment.
"""

# FLOW:
# - Read env vars once and expose SESSION_SETTINGS.
# - SessionOptions resolves the key namespace and tracking key once per handler.
# HOW:
# - Loads .env with python-dotenv, then reads env vars into a dict.

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass

import dotenv

from Sessions.errors import SessionConfigError


logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY_SLUG = "-session"
DEFAULT_USER_CHECK_KEY = "user_check"


def get_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def get_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _env_path() -> str:
    root = os.path.dirname(os.path.dirname(__file__))
    return os.path.join(root, os.getenv("SESSION_ENV_FILE", ".env"))


def load_session_settings() -> dict:
    """Read the session settings from the environment (and .env when present)."""
    dotenv.load_dotenv(_env_path())
    return {
        "SESSION_KEY_SLUG": get_str("SESSION_KEY_SLUG", DEFAULT_SESSION_KEY_SLUG),
        "SESSION_USER_CHECK_KEY": get_str("SESSION_USER_CHECK_KEY", DEFAULT_USER_CHECK_KEY),
        "SESSION_APP_SLUG": get_str("SESSION_APP_SLUG", ""),
        "SESSION_COOKIE_NAME": get_str("SESSION_COOKIE_NAME", "session"),
        "SESSION_COOKIE_PATH": get_str("SESSION_COOKIE_PATH", "/"),
        "SESSION_MAX_AGE": get_int("SESSION_MAX_AGE", 60 * 60 * 8),
        "SESSION_HTTPS_ONLY": get_bool("SESSION_HTTPS_ONLY", True),
        "SESSION_SAME_SITE": get_str("SESSION_SAME_SITE", "lax"),
        "SESSION_LOG_DIR": get_str("SESSION_LOG_DIR", "logs"),
    }


SESSION_SETTINGS = load_session_settings()


def ensure_session_secret(env_name: str = "SESSION_SECRET_KEY") -> str:
    """Return the configured session secret, generating an ephemeral one if unset."""
    dotenv.load_dotenv(_env_path())
    primary = os.getenv(env_name) or os.getenv("SECRET_KEY")
    placeholders = {"", "change-this-secret", "REPLACE_WITH_SECURE_RANDOM_SECRET"}
    if primary and primary not in placeholders:
        os.environ[env_name] = primary
        return primary

    secret = secrets.token_urlsafe(64)
    os.environ[env_name] = secret
    logger.warning(
        "%s is not set; generated an ephemeral secret, sessions will not survive a restart",
        env_name,
    )
    return secret


@dataclass(frozen=True)
class SessionOptions:
    """Naming options of the session handler, resolved once at construction."""

    session_key_slug: str = DEFAULT_SESSION_KEY_SLUG
    user_check_key_name: str = DEFAULT_USER_CHECK_KEY
    app_slug: str = ""

    def __post_init__(self):
        if not self.session_key_slug and not self.app_slug:
            raise SessionConfigError("session key namespace must not be empty")
        if not self.user_check_key_name:
            raise SessionConfigError("user check key name must not be empty")

    @property
    def namespace(self) -> str:
        return f"{self.app_slug}{self.session_key_slug}"

    @classmethod
    def from_settings(cls, settings: dict | None = None) -> "SessionOptions":
        settings = SESSION_SETTINGS if settings is None else settings
        return cls(
            session_key_slug=settings.get("SESSION_KEY_SLUG", DEFAULT_SESSION_KEY_SLUG),
            user_check_key_name=settings.get("SESSION_USER_CHECK_KEY", DEFAULT_USER_CHECK_KEY),
            app_slug=settings.get("SESSION_APP_SLUG", ""),
        )
