"""
auth/sessions.py -- SessionManager: login, token check, logout.

Each token moves through absent -> active -> (expired | revoked). Expired and
revoked tokens read back exactly like tokens that never existed, so callers
only ever see "valid, here is the identity" or AUTH_REQUIRED.

  login(username, password)  verifier -> mint token -> store.put(prefix + token, identity, ttl)
  check_token(token)         store.get(prefix + token) -> identity | AUTH_REQUIRED
  logout(token)              store.delete(prefix + token); always succeeds

Expiry is fixed from issuance: check_token never renews the TTL, so it is safe
to call on every incoming request.

No exception crosses this boundary. Verifier failures (AuthError) are returned
with their own code and message untouched; backend failures
(SessionStoreUnavailable) become STORE_UNAVAILABLE for login/check_token and
are logged and ignored by logout.

Layer rule: auth/ may import from core/ and cache/.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from auth.errors import AuthError
from auth.models import AuthErrorCode, CheckResult, LoginResult, LogoutResult, Session
from auth.tokens import TokenFactory, generate_session_token, token_fingerprint
from auth.verifier import CredentialVerifier, build_verifier
from cache.store import SessionStore, SessionStoreUnavailable, create_session_store
from core.config import DEFAULT_TOKEN_KEY_PREFIX, DEFAULT_TTL_SECONDS, Settings, get_settings

logger = logging.getLogger("tokengate.auth")


class SessionManager:
    """Orchestrates the token session lifecycle over a verifier and a store.

    The store may be shared with unrelated cached data: every key this class
    writes is namespaced under key_prefix, which callers never see.

    clock only dates Session.expires_at; the store applies the TTL on its own
    clock. Both default to time.time, so pass the same clock to both when
    injecting one.
    """

    def __init__(
        self,
        verifier: CredentialVerifier,
        store: SessionStore,
        token_factory: TokenFactory = generate_session_token,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = DEFAULT_TOKEN_KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if not key_prefix:
            raise ValueError("key_prefix must not be empty")
        self._verifier = verifier
        self._store = store
        self._token_factory = token_factory
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self._key_prefix}{token}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def issue_session(self, identity: str) -> Session:
        """Mint a fresh token for an already-authenticated identity and store it.

        Raises SessionStoreUnavailable if the backend rejects the write.
        """
        token = self._token_factory()
        expires_at = self._clock() + self._ttl_seconds
        self._store.put(self._key(token), identity, self._ttl_seconds)
        return Session(token=token, identity=identity, expires_at=expires_at)

    def login(self, username: str | None, password: str | None) -> LoginResult:
        """Verify credentials and issue a new session token."""
        try:
            identity = self._verifier.verify(username, password)
        except AuthError as exc:
            # Log the code only: never the password, never which branch failed.
            logger.info("Login rejected: %s", exc.code.value)
            return LoginResult.fail(exc.code)

        try:
            session = self.issue_session(identity)
        except SessionStoreUnavailable as exc:
            logger.error("Login for '%s' failed, session store unavailable: %s", identity, exc)
            return LoginResult.fail(AuthErrorCode.STORE_UNAVAILABLE)

        logger.info("Login succeeded for '%s' (session %s)", identity, token_fingerprint(session.token))
        return LoginResult.ok(token=session.token, user=session.identity)

    def check_token(self, token: str | None) -> CheckResult:
        """Resolve a token to its identity without touching its expiry."""
        t = str(token or "").strip()
        if not t:
            return CheckResult.fail(AuthErrorCode.AUTH_REQUIRED)
        try:
            identity = self._store.get(self._key(t))
        except SessionStoreUnavailable as exc:
            logger.error("Token check failed, session store unavailable: %s", exc)
            return CheckResult.fail(AuthErrorCode.STORE_UNAVAILABLE)
        if not identity:
            return CheckResult.fail(AuthErrorCode.AUTH_REQUIRED)
        return CheckResult.ok(identity)

    def logout(self, token: str | None) -> LogoutResult:
        """Revoke a token. Always succeeds, whether or not the token was live."""
        t = str(token or "").strip()
        if t:
            try:
                self._store.delete(self._key(t))
            except SessionStoreUnavailable as exc:
                logger.warning("Logout for session %s not recorded: %s", token_fingerprint(t), exc)
            else:
                logger.info("Logged out session %s", token_fingerprint(t))
        return LogoutResult()


def create_session_manager(settings: Settings | None = None) -> SessionManager:
    """Wire a SessionManager from settings (defaults to get_settings())."""
    settings = settings or get_settings()
    return SessionManager(
        verifier=build_verifier(settings),
        store=create_session_store(settings),
        ttl_seconds=settings.ttl_seconds,
        key_prefix=settings.token_key_prefix,
    )
