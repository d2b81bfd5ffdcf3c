"""
auth/tokens.py -- Session token generation.

Tokens are opaque random strings, not JWTs: they carry no claims and mean
nothing without the session store. secrets.token_urlsafe(32) draws 32 random
bytes (256 bits of entropy), so guessing a live token is computationally
infeasible.

SessionManager takes the generator as a zero-argument callable so tests can
substitute a deterministic one.
"""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable

TokenFactory = Callable[[], str]

_TOKEN_BYTES = 32


def generate_session_token() -> str:
    """Return a new URL-safe session token with 256 bits of entropy."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def token_fingerprint(token: str) -> str:
    """Short, non-reversible label for a token, safe to put in log lines."""
    return hashlib.sha256(token.encode("utf-8", errors="surrogatepass")).hexdigest()[:8]
