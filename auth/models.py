"""
auth/models.py -- Domain dataclasses for session authentication.

Pattern: Data class (pure data container, minimal logic). Dataclasses own the
domain shape; the verifier, store and SessionManager do the work.

Every SessionManager operation returns one of the *Result classes below rather
than raising. to_dict() renders the transport-agnostic payload:

  login   -> {"success": true, "token", "user"} | {"success": false, "error"}
  check   -> {"success": true, "user"} | {"success": false, "error": "AUTH_REQUIRED", "authRequired": true}
  logout  -> {"success": true}

Layer rule: no imports from cache/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AuthErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


# User-facing messages. INVALID_CREDENTIALS is deliberately one message for
# both "unknown user" and "wrong password".
ERROR_MESSAGES: dict[AuthErrorCode, str] = {
    AuthErrorCode.INVALID_INPUT: "Missing username or password.",
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid username or password.",
    AuthErrorCode.AUTH_REQUIRED: "AUTH_REQUIRED",
    AuthErrorCode.STORE_UNAVAILABLE: "Session store unavailable.",
}


@dataclass(frozen=True)
class Session:
    """An issued session. expires_at is wall-clock epoch seconds."""

    token: str
    identity: str
    expires_at: float


@dataclass(frozen=True)
class LoginResult:
    success: bool
    token: str | None = None
    user: str | None = None
    code: AuthErrorCode | None = None
    error: str | None = None

    @classmethod
    def ok(cls, token: str, user: str) -> LoginResult:
        return cls(success=True, token=token, user=user)

    @classmethod
    def fail(cls, code: AuthErrorCode) -> LoginResult:
        return cls(success=False, code=code, error=ERROR_MESSAGES[code])

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "token": self.token, "user": self.user}
        return {"success": False, "error": self.error}


@dataclass(frozen=True)
class CheckResult:
    success: bool
    user: str | None = None
    code: AuthErrorCode | None = None
    error: str | None = None

    @classmethod
    def ok(cls, user: str) -> CheckResult:
        return cls(success=True, user=user)

    @classmethod
    def fail(cls, code: AuthErrorCode = AuthErrorCode.AUTH_REQUIRED) -> CheckResult:
        return cls(success=False, code=code, error=ERROR_MESSAGES[code])

    @property
    def auth_required(self) -> bool:
        return self.code is AuthErrorCode.AUTH_REQUIRED

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "user": self.user}
        payload: dict[str, Any] = {"success": False, "error": self.error}
        if self.auth_required:
            payload["authRequired"] = True
        return payload


@dataclass(frozen=True)
class LogoutResult:
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"success": True}
