"""
tests/test_session_store.py — Session Store Lifecycle & Observers
==================================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from podium.services.session_store import AuthSession, SessionEvent, SessionStore


def _session(token_id: str = "tok-1", user_id: str = "u1", *, ttl: timedelta = timedelta(hours=1)):
    return AuthSession(
        token_id=token_id,
        user_id=user_id,
        email=f"{user_id}@example.com",
        role="athlete",
        expires_at=datetime.now(UTC) + ttl,
    )


@pytest.fixture
def store():
    s = SessionStore()
    s.init()
    yield s
    s.teardown()


class TestLifecycle:
    def test_set_before_init_raises(self):
        with pytest.raises(RuntimeError, match="init"):
            SessionStore().set_session(_session())

    def test_teardown_drops_sessions_and_deactivates(self, store):
        store.set_session(_session())
        store.teardown()
        assert len(store) == 0
        assert not store.active


class TestSessions:
    def test_get_returns_live_session(self, store):
        s = _session()
        store.set_session(s)
        assert store.get("tok-1") is s

    def test_unknown_token(self, store):
        assert store.get("nope") is None

    def test_expired_session_is_pruned(self, store):
        store.set_session(_session(ttl=timedelta(seconds=-1)))
        assert store.get("tok-1") is None
        assert len(store) == 0

    def test_clear_session(self, store):
        store.set_session(_session())
        assert store.clear_session("tok-1") is not None
        assert store.clear_session("tok-1") is None
        assert store.get("tok-1") is None

    def test_sessions_for_user(self, store):
        store.set_session(_session("a", "u1"))
        store.set_session(_session("b", "u1"))
        store.set_session(_session("c", "u2"))
        assert {s.token_id for s in store.sessions_for("u1")} == {"a", "b"}


class TestObservers:
    def test_listener_sees_sign_in_and_out(self, store):
        listener = MagicMock()
        store.subscribe(listener)
        s = _session()
        store.set_session(s)
        store.clear_session(s.token_id)
        assert [c.args for c in listener.call_args_list] == [
            (SessionEvent.SIGNED_IN, s),
            (SessionEvent.SIGNED_OUT, s),
        ]

    def test_unsubscribe(self, store):
        listener = MagicMock()
        unsubscribe = store.subscribe(listener)
        unsubscribe()
        store.set_session(_session())
        listener.assert_not_called()

    def test_failing_listener_does_not_block_others(self, store):
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        store.subscribe(broken)
        store.subscribe(healthy)
        store.set_session(_session())
        healthy.assert_called_once()

    def test_expiry_emits_sign_out(self, store):
        listener = MagicMock()
        store.set_session(_session(ttl=timedelta(seconds=-1)))
        store.subscribe(listener)
        store.get("tok-1")
        assert listener.call_args.args[0] == SessionEvent.SIGNED_OUT
