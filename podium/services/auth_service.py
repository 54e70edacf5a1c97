"""
podium.services.auth_service — Email/Password Accounts
=======================================================

Sign-up, sign-in and sign-out against the ``users`` table.  Passwords are
stored as bcrypt hashes.  Successful sign-ins are registered in the
injected :class:`~podium.services.session_store.SessionStore`; token
encoding is left to the API layer.
"""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from podium.constants import MAX_PASSWORD_BYTES
from podium.database.engine import get_session
from podium.database.models import User
from podium.engine.validation import validate_signup
from podium.errors import AuthenticationFailed, DuplicateRecord, NotFound
from podium.services.session_store import AuthSession, SessionStore

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(engine: Engine, user_id: str) -> User:
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user


def get_user_by_email(engine: Engine, email: str) -> User | None:
    with get_session(engine) as session:
        return session.scalar(select(User).where(User.email == _normalize_email(email)))


def sign_up(
    engine: Engine,
    *,
    email: str,
    password: str,
    name: str,
    role: str = "athlete",
) -> User:
    """Create a new account.  Only athletes and coaches may self-register."""
    validate_signup(email, password, name, role)
    email = _normalize_email(email)

    try:
        with get_session(engine) as session:
            if session.scalar(select(User.id).where(User.email == email)):
                raise DuplicateRecord("An account with this email already exists")
            user = User(
                email=email,
                name=name.strip(),
                role=role,
                password_hash=hash_password(password),
            )
            session.add(user)
            session.flush()
    except IntegrityError as exc:
        raise DuplicateRecord("An account with this email already exists") from exc

    logger.info("User signed up: %s (%s)", user.id, role)
    return user


def sign_in(
    engine: Engine,
    store: SessionStore,
    *,
    email: str,
    password: str,
    ttl_hours: int = 12,
) -> tuple[AuthSession, User]:
    """Check credentials and register a new session in *store*."""
    user = get_user_by_email(engine, email)
    if user is None or not user.password_hash or not verify_password(
        password, user.password_hash
    ):
        raise AuthenticationFailed("Invalid email or password")

    auth_session = AuthSession(
        token_id=secrets.token_urlsafe(16),
        user_id=user.id,
        email=user.email,
        role=user.role,
        expires_at=datetime.now(UTC) + timedelta(hours=ttl_hours),
    )
    store.set_session(auth_session)
    logger.info("User signed in: %s", user.id)
    return auth_session, user


def sign_out(store: SessionStore, token_id: str) -> bool:
    """End the session for *token_id*.  Returns False if it was not live."""
    session = store.clear_session(token_id)
    if session is not None:
        logger.info("User signed out: %s", session.user_id)
    return session is not None
