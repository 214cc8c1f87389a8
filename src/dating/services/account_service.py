# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from dating.auth.passwords import dummy_verify, hash_password, needs_rehash, verify_password
from dating.errors import AuthError, ConstraintError, DatingError, NotFoundError, ValidationError
from dating.infra.user_repo import MATCH_LIMIT, Match, Profile, UserStore

logger = logging.getLogger(__name__)

REGISTER_FIELDS = ("name", "email", "password", "bio")
LOGIN_FIELDS = ("email", "password")
PROFILE_FIELDS = ("name", "bio")

MSG_REGISTER_MISSING = "Please fill out all fields."
MSG_EMAIL_TAKEN = "That email is already registered."
MSG_LOGIN_MISSING = "Email and password are required."
MSG_BAD_CREDENTIALS = "Invalid email or password."
MSG_PROFILE_MISSING = "Name and bio are required."

# Passwords are taken verbatim, everything else is trimmed
_UNTRIMMED = {"password"}


def require_fields(form: Mapping[str, Optional[str]], names: Sequence[str], message: str) -> Dict[str, str]:
    """Return the named fields cleaned, or raise ValidationError listing every blank one."""
    out: Dict[str, str] = {}
    missing: List[str] = []
    for name in names:
        raw = form.get(name)
        value = raw if name in _UNTRIMMED else str(raw or "").strip()
        if not value:
            missing.append(name)
            continue
        out[name] = value
    if missing:
        raise ValidationError(message, fields=missing)
    return out


def register(store: UserStore, form: Mapping[str, Optional[str]]) -> int:
    """Create an account and return its id.

    The email pre-check only spares a hash computation; the UNIQUE constraint
    is what actually rejects a duplicate, and both paths raise the same error.
    """
    data = require_fields(form, REGISTER_FIELDS, MSG_REGISTER_MISSING)

    if store.find_by_email(data["email"]) is not None:
        raise ConstraintError(MSG_EMAIL_TAKEN, field="email")

    password_hash = hash_password(data["password"])
    try:
        user_id = store.insert(data["name"], data["email"], password_hash, data["bio"])
    except ConstraintError as exc:
        raise ConstraintError(MSG_EMAIL_TAKEN, field=exc.field) from exc

    logger.info("Registered user id=%s", user_id)
    return user_id


def authenticate(store: UserStore, form: Mapping[str, Optional[str]]) -> int:
    """Check credentials and return the user id. Unknown email and wrong password look the same."""
    data = require_fields(form, LOGIN_FIELDS, MSG_LOGIN_MISSING)

    user = store.find_by_email(data["email"])
    if user is None:
        dummy_verify(data["password"])
        logger.info("Failed login (unknown email)")
        raise AuthError(MSG_BAD_CREDENTIALS)
    if not verify_password(user.password_hash, data["password"]):
        logger.info("Failed login for user id=%s", user.id)
        raise AuthError(MSG_BAD_CREDENTIALS)

    if needs_rehash(user.password_hash):
        try:
            store.update_password_hash(user.id, hash_password(data["password"]))
        except DatingError:
            logger.exception("Could not upgrade password hash for user id=%s", user.id)

    logger.info("User id=%s logged in", user.id)
    return user.id


def load_profile(store: UserStore, user_id: int) -> Profile:
    profile = store.find_by_id(user_id)
    if profile is None:
        raise NotFoundError()
    return profile


def load_dashboard(store: UserStore, user_id: int, limit: int = MATCH_LIMIT) -> Tuple[Profile, List[Match]]:
    """Current user plus up to ``limit`` other members, newest first."""
    profile = load_profile(store, user_id)
    return profile, store.list_others(user_id, limit=limit)


def update_profile(store: UserStore, user_id: int, form: Mapping[str, Optional[str]]) -> None:
    """Change name and bio of user_id. Email, id and created_at are never touched."""
    data = require_fields(form, PROFILE_FIELDS, MSG_PROFILE_MISSING)
    store.update(user_id, data["name"], data["bio"])
    logger.info("User id=%s updated profile", user_id)
