"""
auth/dependencies.py -- FastAPI Depends() helpers for session authorization.

The host application owns routing; these helpers only answer "who is making
this request?" using the SessionManager stored on app.state.session_manager.

Token sources are checked in priority order:
  1. Authorization: Bearer <token> header.
  2. X-Auth-Token header.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated, or HTTP 503
if the session store is down. The check payload travels as the HTTPException
detail, so the body is {"detail": {"success": false, "error": "AUTH_REQUIRED", ...}}.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import AuthErrorCode, CheckResult
from auth.sessions import SessionManager


def extract_token(request: Request) -> str | None:
    """Return the session token carried by the request, or None."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return request.headers.get("X-Auth-Token", "").strip() or None


def _check(request: Request) -> CheckResult:
    manager: SessionManager = request.app.state.session_manager
    return manager.check_token(extract_token(request))


def try_get_current_user(request: Request) -> str | None:
    """Return the identity behind the request's token, or None. Never raises."""
    result = _check(request)
    return result.user if result.success else None


def get_current_user(request: Request) -> str:
    """Require a valid session token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: str = Depends(get_current_user)): ...
    """
    result = _check(request)
    if result.success:
        return result.user
    status_code = 503 if result.code is AuthErrorCode.STORE_UNAVAILABLE else 401
    raise HTTPException(status_code=status_code, detail=result.to_dict())
