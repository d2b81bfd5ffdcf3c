"""
auth/verifier.py -- Credential verifiers: username/password -> identity.

A verifier is any object with verify(username, password) -> str. It returns
the normalized identity on success and raises an AuthError otherwise:

  InvalidInput        -- username or password empty after normalization
  InvalidCredentials  -- unknown username OR wrong password

Both "unknown user" and "wrong password" raise the same InvalidCredentials
with the same message, so callers cannot enumerate usernames.

Implementations:
  StaticCredentialVerifier -- plaintext mapping, exact string equality.
      Suitable only for small internal tools where config access is trusted.
  BcryptCredentialVerifier -- mapping of username -> bcrypt hash. Always runs
      bcrypt (against _DUMMY_HASH for unknown users) so response time does not
      reveal whether a username exists.

Layer rule: no imports from cache/. Import from core/ is allowed.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol

import bcrypt

from auth.errors import InvalidCredentials, InvalidInput

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("tokengate.auth")


class CredentialVerifier(Protocol):
    def verify(self, username: str | None, password: str | None) -> str: ...


def normalize_username(username: str | None) -> str:
    """Trim and lowercase a raw username. None becomes ""."""
    return str(username or "").strip().lower()


def _encode(value: str) -> bytes:
    # Lone surrogates are encoded as-is rather than raising.
    return value.encode("utf-8", errors="surrogatepass")


def _normalize_input(username: str | None, password: str | None) -> tuple[str, str]:
    user = normalize_username(username)
    # Passwords are used as-is; only an empty value counts as missing.
    secret = str(password or "")
    if not user or not secret:
        raise InvalidInput()
    return user, secret


# ---------------------------------------------------------------------------
# Plaintext mapping
# ---------------------------------------------------------------------------


class StaticCredentialVerifier:
    """Checks credentials against a static username -> password mapping."""

    def __init__(self, credentials: Mapping[str, str]) -> None:
        self._credentials = {normalize_username(u): p for u, p in credentials.items()}

    def verify(self, username: str | None, password: str | None) -> str:
        user, secret = _normalize_input(username, password)
        expected = self._credentials.get(user)
        if expected is None:
            raise InvalidCredentials()
        if not hmac.compare_digest(_encode(expected), _encode(secret)):
            raise InvalidCredentials()
        return user


# ---------------------------------------------------------------------------
# bcrypt hashes
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of the password.
    """
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(plain), _encode(hashed))
    except ValueError:
        # Malformed hash in configuration, or password over bcrypt's length limit.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("tokengate_timing_dummy")


class BcryptCredentialVerifier:
    """Checks credentials against a username -> bcrypt hash mapping."""

    def __init__(self, hashes: Mapping[str, str]) -> None:
        self._hashes = {normalize_username(u): h for u, h in hashes.items()}

    def verify(self, username: str | None, password: str | None) -> str:
        user, secret = _normalize_input(username, password)
        hashed = self._hashes.get(user)
        if hashed is None:
            # Equalize timing -- do NOT return before running bcrypt.
            verify_password(secret, _DUMMY_HASH)
            raise InvalidCredentials()
        if not verify_password(secret, hashed):
            raise InvalidCredentials()
        return user


def build_verifier(settings: Settings) -> CredentialVerifier:
    """Build the verifier named by settings.password_scheme."""
    if settings.password_scheme == "bcrypt":
        return BcryptCredentialVerifier(settings.credentials)
    return StaticCredentialVerifier(settings.credentials)
