"""Auth-driven session lifecycle.

The auth provider publishes session-change events; `SessionManager` reacts by
building a fresh `SessionScope` on sign-in and tearing it down on sign-out.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.orm import Session

from creator_crm.config import Settings
from creator_crm.core.security import (
    create_access_token_for_subject,
    decode_access_token_subject,
    token_expiry,
)
from creator_crm.services.session_scope import SessionScope

logger = logging.getLogger("creator_crm.auth")


class AuthEvent(str, Enum):
    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"
    token_refreshed = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    access_token: str
    expires_at: Optional[datetime] = None


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class TokenAuthProvider:
    """Auth provider over signed JWT identity tokens.

    Contract: `get_session()`, `sign_out()` and `on_auth_state_change(listener)`
    which returns an unsubscribe callable.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._session: Optional[AuthSession] = None
        self._listeners: list[AuthListener] = []

    def get_session(self) -> Optional[AuthSession]:
        return self._session

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event, session)

    def sign_in(self, user_id: str) -> AuthSession:
        token = create_access_token_for_subject(str(user_id))
        return self._set_session(token)

    def restore(self, token: str) -> Optional[AuthSession]:
        """Adopt an existing token; invalid or expired tokens are ignored."""

        subject = decode_access_token_subject(token)
        if not subject:
            logger.info("auth_token_rejected")
            return None
        return self._set_session(token)

    def refresh(self) -> Optional[AuthSession]:
        current = self._session
        if current is None:
            return None
        token = create_access_token_for_subject(current.user_id)
        session = AuthSession(
            user_id=current.user_id, access_token=token, expires_at=token_expiry(token)
        )
        self._session = session
        self._emit(AuthEvent.token_refreshed, session)
        return session

    def _set_session(self, token: str) -> AuthSession:
        subject = decode_access_token_subject(token)
        if not subject:
            raise ValueError("token has no subject")
        session = AuthSession(user_id=subject, access_token=token, expires_at=token_expiry(token))
        self._session = session
        logger.info("auth_signed_in", extra={"user_id": subject})
        self._emit(AuthEvent.signed_in, session)
        return session

    def sign_out(self) -> None:
        previous = self._session
        self._session = None
        if previous is not None:
            logger.info("auth_signed_out", extra={"user_id": previous.user_id})
        self._emit(AuthEvent.signed_out, None)


class SessionManager:
    """Keeps exactly one live SessionScope for the signed-in identity."""

    def __init__(
        self,
        provider: TokenAuthProvider,
        session_factory: Callable[[], Session],
        *,
        app_settings: Settings | None = None,
    ):
        self.provider = provider
        self.session_factory = session_factory
        self.app_settings = app_settings
        self.scope: Optional[SessionScope] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> Optional[SessionScope]:
        self._unsubscribe = self.provider.on_auth_state_change(self.handle_event)
        current = self.provider.get_session()
        if current is not None:
            self._open(current)
        return self.scope

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._close()

    def handle_event(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        if event == AuthEvent.signed_in and session is not None:
            self._open(session)
        elif event == AuthEvent.signed_out:
            self._close()
        elif event == AuthEvent.token_refreshed and session is not None and self.scope is None:
            self._open(session)

    def _open(self, session: AuthSession) -> None:
        if self.scope is not None and self.scope.user_id == session.user_id:
            return
        self._close()
        scope = SessionScope(
            self.session_factory(), user_id=session.user_id, app_settings=self.app_settings
        )
        self.scope = scope
        scope.load_all()

    def _close(self) -> None:
        scope, self.scope = self.scope, None
        if scope is None:
            return
        scope.close()
        # Session.close() leaves the session reusable, so a mutation that
        # resolves after sign-out still reaches the database.
        scope.db.close()
