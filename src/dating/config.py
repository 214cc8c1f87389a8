# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Only ever used outside production; see load_settings().
DEV_SECRET = "dev-secret"
TRUTHY = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    db_path: Path
    secret_key: str
    env: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    session_max_age: int = 28800  # 8 hours
    cookie_name: str = "dating_session"
    cookie_secure: bool = False
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.env.strip().lower() in {"prod", "production"}


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in TRUTHY


def load_settings() -> Settings:
    """Build Settings from the environment.

    A missing session secret is fatal in production. Elsewhere the app falls
    back to a well-known development secret and says so in the log.
    """
    env = os.getenv("DATING_ENV", "development")
    secret = os.getenv("SESSION_SECRET") or os.getenv("DATING_SECRET_KEY") or ""
    if not secret:
        if env.strip().lower() in {"prod", "production"}:
            raise RuntimeError("Missing SESSION_SECRET (or DATING_SECRET_KEY) in environment")
        logger.warning("SESSION_SECRET is not set; using the development secret")
        secret = DEV_SECRET

    return Settings(
        db_path=Path(os.getenv("DATING_DB_PATH", "data/dating.db")).resolve(),
        secret_key=secret,
        env=env,
        host=os.getenv("DATING_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT") or os.getenv("DATING_PORT") or "3000"),
        reload=_flag("DATING_RELOAD"),
        session_max_age=int(os.getenv("DATING_SESSION_MAX_AGE", "28800")),
        cookie_name=os.getenv("DATING_COOKIE_NAME", "dating_session"),
        cookie_secure=_flag("DATING_COOKIE_SECURE"),
        log_level=os.getenv("DATING_LOG_LEVEL", "INFO").upper(),
    )
