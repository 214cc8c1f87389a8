# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from functools import lru_cache

import argon2
from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from dating.errors import InfrastructureError

_PH = PasswordHasher(
    time_cost=int(os.getenv("DATING_ARGON2_TIME_COST", str(argon2.DEFAULT_TIME_COST))),
    memory_cost=int(os.getenv("DATING_ARGON2_MEMORY_COST", str(argon2.DEFAULT_MEMORY_COST))),
    parallelism=int(os.getenv("DATING_ARGON2_PARALLELISM", str(argon2.DEFAULT_PARALLELISM))),
)


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    try:
        return _PH.hash(plain)
    except HashingError as exc:
        raise InfrastructureError() from exc


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hash_value: str) -> bool:
    """True when hash_value was produced with other cost parameters than the current ones."""
    try:
        return _PH.check_needs_rehash(hash_value)
    except InvalidHashError:
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return _PH.hash("dating.dummy-password")


def dummy_verify(plain: str) -> None:
    """Spend one verification on a throwaway hash (unknown email on login)."""
    verify_password(_dummy_hash(), plain or "x")
