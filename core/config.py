"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for TokenGate happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. ttl_seconds -> TTL_SECONDS). Complex fields such as CREDENTIALS are
      parsed as JSON by pydantic-settings.

  @field_validator / @model_validator: normalize credential usernames and
      reject unusable values (non-positive TTL, empty key prefix) at startup.

Layer rule: core/ is the kernel. This module may not import from auth/ or cache/.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("tokengate.config")

DEFAULT_TTL_SECONDS = 60 * 60 * 8  # 8 hours
DEFAULT_TOKEN_KEY_PREFIX = "authToken:"
_DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "cache" / "sessions.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. Values are read once at startup;
    there is no runtime mutation API.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    ttl_seconds: int = DEFAULT_TTL_SECONDS
    token_key_prefix: str = DEFAULT_TOKEN_KEY_PREFIX

    # "memory" keeps sessions in-process; "sqlite" persists them to
    # session_db_path so they survive a restart.
    session_backend: Literal["memory", "sqlite"] = "memory"
    session_db_path: Path = _DEFAULT_DB_PATH

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    # Username -> secret. With password_scheme="plain" the secret is the
    # cleartext password; with "bcrypt" it is a bcrypt hash.
    credentials: dict[str, str] = {}
    password_scheme: Literal["plain", "bcrypt"] = "plain"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("credentials")
    @classmethod
    def normalize_usernames(cls, value: dict[str, str]) -> dict[str, str]:
        """Trim and lowercase usernames so lookups match normalized input."""
        normalized: dict[str, str] = {}
        for username, secret in value.items():
            key = username.strip().lower()
            if not key:
                raise ValueError("CREDENTIALS contains an empty username.")
            if key in normalized:
                raise ValueError(f"CREDENTIALS contains duplicate username '{key}' after normalization.")
            normalized[key] = secret
        return normalized

    @model_validator(mode="after")
    def validate_sessions(self) -> "Settings":
        """Reject session settings that would make every token unusable."""
        if self.ttl_seconds <= 0:
            raise ValueError("TTL_SECONDS must be a positive number of seconds.")
        if not self.token_key_prefix:
            raise ValueError("TOKEN_KEY_PREFIX must not be empty.")
        if not self.credentials:
            logger.warning("No CREDENTIALS configured -- every login attempt will be rejected.")
        elif self.password_scheme == "plain":
            logger.warning("CREDENTIALS use plaintext passwords. Use PASSWORD_SCHEME=bcrypt outside trusted tools.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
