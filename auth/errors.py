"""
auth/errors.py -- Exception raised by authentication collaborators.

Credential verifiers raise AuthError; SessionManager catches it and turns it
into a failed result, so no AuthError ever crosses the manager boundary.
"""

from __future__ import annotations

from auth.models import ERROR_MESSAGES, AuthErrorCode


class AuthError(Exception):
    """An authentication failure with a fixed, user-facing message."""

    def __init__(self, code: AuthErrorCode) -> None:
        self.code = code
        self.message = ERROR_MESSAGES[code]
        super().__init__(self.message)


class InvalidInput(AuthError):
    def __init__(self) -> None:
        super().__init__(AuthErrorCode.INVALID_INPUT)


class InvalidCredentials(AuthError):
    def __init__(self) -> None:
        super().__init__(AuthErrorCode.INVALID_CREDENTIALS)
