# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from dating import __version__
from dating.auth.session import SessionState, SessionStore
from dating.config import Settings, load_settings
from dating.errors import AuthError, ConstraintError, DatingError, NotFoundError, ValidationError
from dating.infra.user_repo import UserStore
from dating.permissions import (
    SessionContext,
    cookie_settings,
    current_session,
    get_sessions,
    get_settings,
    get_store,
    require_user,
)
from dating.services import account_service

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# Errors the visitor can fix by resubmitting the form
RECOVERABLE = (ValidationError, AuthError, ConstraintError)

router = APIRouter()


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the defaults every page expects."""
    base_ctx = {"error": None, "form": {}}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


def _start_session(
    url: str,
    user_id: int,
    *,
    session: SessionContext,
    sessions: SessionStore,
    settings: Settings,
) -> RedirectResponse:
    """Bind a fresh token to user_id and redirect; any previous token is dropped."""
    sessions.destroy(session.token)
    token = sessions.new_token()
    sessions.set(token, SessionState(user_id=user_id))
    resp = _redirect(url)
    resp.set_cookie(
        settings.cookie_name,
        sessions.dumps(token),
        max_age=settings.session_max_age,
        **cookie_settings(settings),
    )
    return resp


def _error_page(request: Request, exc: DatingError, message: str):
    if isinstance(exc, NotFoundError):
        return _render(request, "error.html", {"error": exc.message}, status_code=exc.status_code)
    logger.error("Request to %s failed: %r", request.url.path, exc, exc_info=exc)
    return _render(request, "error.html", {"error": message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ------------------ Routes ------------------


@router.get("/")
def home(session: SessionContext = Depends(current_session)):
    return _redirect("/dashboard" if session.state.authenticated else "/login")


@router.get("/register", response_class=HTMLResponse)
def register_get(request: Request):
    return _render(request, "register.html")


@router.post("/register")
def register_post(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    bio: str = Form(""),
    store: UserStore = Depends(get_store),
    session: SessionContext = Depends(current_session),
    sessions: SessionStore = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    form = {"name": name, "email": email, "bio": bio}
    try:
        user_id = account_service.register(store, {**form, "password": password})
    except RECOVERABLE as exc:
        return _render(request, "register.html", {"error": exc.message, "form": form}, status_code=exc.status_code)
    except DatingError:
        logger.exception("Registration failed")
        return _render(
            request,
            "register.html",
            {"error": "Unable to create account right now.", "form": form},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return _start_session("/dashboard", user_id, session=session, sessions=sessions, settings=settings)


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request):
    return _render(request, "login.html")


@router.post("/login")
def login_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    store: UserStore = Depends(get_store),
    session: SessionContext = Depends(current_session),
    sessions: SessionStore = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    form = {"email": email}
    try:
        user_id = account_service.authenticate(store, {"email": email, "password": password})
    except RECOVERABLE as exc:
        return _render(request, "login.html", {"error": exc.message, "form": form}, status_code=exc.status_code)
    except DatingError:
        logger.exception("Login failed")
        return _render(
            request,
            "login.html",
            {"error": "Unable to log in right now.", "form": form},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return _start_session("/dashboard", user_id, session=session, sessions=sessions, settings=settings)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, user_id: int = Depends(require_user), store: UserStore = Depends(get_store)):
    try:
        current_user, matches = account_service.load_dashboard(store, user_id)
    except DatingError as exc:
        return _error_page(request, exc, "Unable to load your dashboard right now.")
    return _render(request, "dashboard.html", {"current_user": current_user, "matches": matches})


@router.get("/logout")
def logout(
    session: SessionContext = Depends(current_session),
    sessions: SessionStore = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    if sessions.destroy(session.token):
        logger.info("User id=%s logged out", session.state.user_id)
    resp = _redirect("/login")
    resp.delete_cookie(settings.cookie_name)
    return resp


@router.get("/profile", response_class=HTMLResponse)
def profile_get(request: Request, user_id: int = Depends(require_user), store: UserStore = Depends(get_store)):
    try:
        current_user = account_service.load_profile(store, user_id)
    except DatingError as exc:
        return _error_page(request, exc, "Unable to load your profile right now.")
    form = {"name": current_user.name, "email": current_user.email, "bio": current_user.bio}
    return _render(request, "profile.html", {"form": form})


@router.post("/profile")
def profile_post(
    request: Request,
    name: str = Form(""),
    bio: str = Form(""),
    user_id: int = Depends(require_user),
    store: UserStore = Depends(get_store),
):
    form = {"name": name, "bio": bio}
    try:
        account_service.update_profile(store, user_id, form)
    except ValidationError as exc:
        return _render(request, "profile.html", {"error": exc.message, "form": form}, status_code=exc.status_code)
    except NotFoundError as exc:
        return _error_page(request, exc, "Unable to update your profile right now.")
    except DatingError:
        logger.exception("Profile update failed for user id=%s", user_id)
        return _render(
            request,
            "profile.html",
            {"error": "Unable to update your profile right now.", "form": form},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return _redirect("/dashboard")


# ------------------ App factory ------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the ASGI app.

    The user store is opened and its schema created in the lifespan, before the
    server accepts connections. A schema failure propagates and aborts startup.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = UserStore.for_path(settings.db_path)
        try:
            store.init_schema()
        except DatingError:
            store.close()
            logger.critical("Failed to initialise database at %s", settings.db_path)
            raise
        app.state.store = store
        logger.info("Dating app ready (db=%s)", settings.db_path)
        try:
            yield
        finally:
            store.close()
            logger.info("Dating app stopped")

    app = FastAPI(title="Dating", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.sessions = SessionStore(settings.secret_key, max_age=settings.session_max_age)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
    app.include_router(router)
    return app


app = create_app()
