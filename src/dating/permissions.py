# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from dating.auth.session import SessionState, SessionStore
from dating.config import Settings
from dating.infra.user_repo import UserStore


@dataclass(frozen=True)
class SessionContext:
    token: Optional[str]
    state: SessionState


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> UserStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def current_session(
    request: Request,
    settings: Settings = Depends(get_settings),
    sessions: SessionStore = Depends(get_sessions),
) -> SessionContext:
    token = sessions.loads(request.cookies.get(settings.cookie_name, ""))
    return SessionContext(token=token, state=sessions.get(token))


def require_user(session: SessionContext = Depends(current_session)) -> int:
    """Id of the logged-in user; anonymous visitors are sent to /login."""
    if session.state.authenticated:
        return session.state.user_id
    raise HTTPException(status_code=status.HTTP_302_FOUND, headers={"Location": "/login"})


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": settings.cookie_secure}
