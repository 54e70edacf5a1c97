"""
podium.api.auth — Email/password sign-in + JWT issuance
========================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from podium.api.deps import (
    encode_session_token,
    get_config,
    get_current_session,
    get_engine,
    get_session_store,
)
from podium.api.serializers import user_dict
from podium.config import PodiumConfig
from podium.database.engine import run_db
from podium.services import auth_service
from podium.services.session_store import AuthSession, SessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


class SignUp(BaseModel):
    email: str
    password: str
    name: str
    role: str = "athlete"


class Login(BaseModel):
    email: str
    password: str


@router.post("/signup", status_code=201)
async def signup(body: SignUp, engine=Depends(get_engine)):
    user = await run_db(
        auth_service.sign_up, engine,
        email=body.email, password=body.password, name=body.name, role=body.role,
    )
    return {"user": user_dict(user)}


@router.post("/login")
async def login(
    body: Login,
    engine=Depends(get_engine),
    store: SessionStore = Depends(get_session_store),
    cfg: PodiumConfig = Depends(get_config),
):
    session, user = await run_db(
        auth_service.sign_in, engine, store,
        email=body.email, password=body.password, ttl_hours=cfg.session_ttl_hours,
    )
    return {
        "access_token": encode_session_token(session),
        "token_type": "bearer",
        "expires_at": session.expires_at.isoformat(),
        "user": user_dict(user),
    }


@router.post("/logout")
async def logout(
    session: AuthSession = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
):
    return {"signed_out": auth_service.sign_out(store, session.token_id)}


@router.get("/me")
async def me(
    session: AuthSession = Depends(get_current_session),
    engine=Depends(get_engine),
):
    """Return the signed-in user's profile."""
    user = await run_db(auth_service.get_user, engine, session.user_id)
    return {"user": user_dict(user)}
