"""
podium.services.session_store — Auth Session Store
===================================================

Holds the live sign-in sessions for this process and notifies observers
when a session starts or ends.  There is no ambient "current user": the
store is created once by the API lifespan and injected wherever session
context is needed.

Lifecycle::

    store = SessionStore()
    store.init()
    unsubscribe = store.subscribe(on_change)   # on_change(event, session)
    ...
    store.teardown()                           # drops sessions + observers

Each session is keyed by its ``token_id`` (the JWT ``jti`` claim).  Signing
out removes the entry, which makes the bearer token unusable even before
it expires.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


class SessionEvent(enum.StrEnum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True, slots=True)
class AuthSession:
    token_id: str
    user_id: str
    email: str
    role: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) >= self.expires_at


SessionListener = Callable[[SessionEvent, AuthSession], None]


class SessionStore:
    """Thread-safe session registry with an observer list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, AuthSession] = {}
        self._listeners: list[SessionListener] = []
        self._active = False

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def init(self) -> None:
        with self._lock:
            self._active = True
        logger.info("Session store initialised")

    def teardown(self) -> None:
        with self._lock:
            self._active = False
            count = len(self._sessions)
            self._sessions.clear()
            self._listeners.clear()
        logger.info("Session store torn down (%d sessions dropped)", count)

    @property
    def active(self) -> bool:
        return self._active

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: SessionEvent, session: AuthSession) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Session listener failed on %s", event)

    # -------------------------------------------------------------------
    # Session mutations
    # -------------------------------------------------------------------
    def set_session(self, session: AuthSession) -> None:
        with self._lock:
            if not self._active:
                raise RuntimeError("SessionStore.init() has not been called")
            self._sessions[session.token_id] = session
        self._emit(SessionEvent.SIGNED_IN, session)

    def clear_session(self, token_id: str) -> AuthSession | None:
        with self._lock:
            session = self._sessions.pop(token_id, None)
        if session is not None:
            self._emit(SessionEvent.SIGNED_OUT, session)
        return session

    def get(self, token_id: str) -> AuthSession | None:
        """Return the live session for *token_id*, pruning it if expired."""
        with self._lock:
            session = self._sessions.get(token_id)
            if session is None:
                return None
            if not session.is_expired():
                return session
            del self._sessions[token_id]
        self._emit(SessionEvent.SIGNED_OUT, session)
        return None

    def sessions_for(self, user_id: str) -> list[AuthSession]:
        with self._lock:
            return [s for s in self._sessions.values() if s.user_id == user_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
