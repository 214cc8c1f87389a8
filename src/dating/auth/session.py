# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

DEFAULT_MAX_AGE_SECONDS = 28800  # 8 hours
DEFAULT_SALT = "dating.session.v1"


@dataclass(frozen=True)
class SessionState:
    user_id: Optional[int] = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = SessionState()


class SessionStore:
    """In-process mapping from opaque session tokens to SessionState.

    The token itself is random; what travels in the cookie is the token signed
    with the app secret, so a forged or tampered cookie never reaches the map.
    Entries idle for longer than ``max_age`` seconds are treated as gone.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        max_age: int = DEFAULT_MAX_AGE_SECONDS,
        salt: str = DEFAULT_SALT,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not secret_key:
            raise ValueError("Session secret must not be empty")
        self.max_age = max_age
        self._clock = clock
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)
        self._entries: Dict[str, Tuple[float, SessionState]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(32)

    def get(self, token: Optional[str]) -> SessionState:
        if not token:
            return ANONYMOUS
        now = self._clock()
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return ANONYMOUS
            touched, state = entry
            if now - touched > self.max_age:
                del self._entries[token]
                return ANONYMOUS
            self._entries[token] = (now, state)
            return state

    def set(self, token: str, state: SessionState) -> None:
        if not token:
            raise ValueError("Session token must not be empty")
        self.purge_expired()
        with self._lock:
            self._entries[token] = (self._clock(), state)

    def destroy(self, token: Optional[str]) -> bool:
        """Drop the session. Returns False when there was nothing to drop."""
        if not token:
            return False
        with self._lock:
            return self._entries.pop(token, None) is not None

    def purge_expired(self) -> int:
        cutoff = self._clock() - self.max_age
        with self._lock:
            stale = [t for t, (touched, _) in self._entries.items() if touched < cutoff]
            for t in stale:
                del self._entries[t]
        return len(stale)

    # Cookie transport

    def dumps(self, token: str) -> str:
        return self._serializer.dumps({"t": token})

    def loads(self, cookie_value: Optional[str]) -> Optional[str]:
        if not cookie_value:
            return None
        try:
            data = self._serializer.loads(cookie_value, max_age=self.max_age)
        except (BadSignature, BadTimeSignature):
            return None
        token = (data or {}).get("t") if isinstance(data, dict) else None
        token = str(token or "").strip()
        return token or None
