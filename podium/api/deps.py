"""
podium.api.deps — FastAPI dependency injection
===============================================
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, Request, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from podium.config import PodiumConfig, load_config
from podium.database.engine import create_db_engine
from podium.engine.badges import BadgeCache
from podium.services.session_store import AuthSession, SessionStore

_WEAK_SECRETS = frozenset({
    "podium-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> PodiumConfig:
    return load_config(os.getenv("PODIUM_CONFIG", "config.yaml"))


def get_session_store(request: Request) -> SessionStore:
    """The process-wide store created by the app lifespan."""
    return request.app.state.session_store


def get_badge_cache(request: Request) -> BadgeCache:
    return request.app.state.badge_cache


def encode_session_token(session: AuthSession) -> str:
    return jwt.encode(
        {
            "sub": session.user_id,
            "jti": session.token_id,
            "role": session.role,
            "exp": session.expires_at,
        },
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


def get_current_session(
    authorization: Annotated[str | None, Header()] = None,
    store: SessionStore = Depends(get_session_store),
) -> AuthSession:
    """Validate the bearer JWT and require its session to still be live."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")

    session = store.get(payload.get("jti", ""))
    if session is None or session.user_id != payload.get("sub"):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Session expired or signed out")
    return session


def get_current_user_id(session: AuthSession = Depends(get_current_session)) -> str:
    return session.user_id
