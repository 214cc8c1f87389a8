# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SQLite-backed user storage.

The store is an explicit handle: build it once at startup, call
``init_schema()`` before serving, ``close()`` at shutdown. Every public method
runs in its own transaction and reads straight from the database.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dating.errors import ConstraintError, NotFoundError, StoreError
from dating.infra.models import Base, UserRow

logger = logging.getLogger(__name__)

MATCH_LIMIT = 12


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    email: str
    password_hash: str
    bio: str
    created_at: datetime


@dataclass(frozen=True)
class Profile:
    id: int
    name: str
    email: str
    bio: str
    created_at: datetime


@dataclass(frozen=True)
class Match:
    name: str
    bio: str


def _is_email_conflict(exc: IntegrityError) -> bool:
    msg = str(getattr(exc, "orig", exc) or "").lower()
    return "unique" in msg and "email" in msg


class UserStore:
    def __init__(self, url: str, *, echo: bool = False):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine = create_engine(url, echo=echo, connect_args=connect_args)
        self._session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def for_path(cls, path: Path, **kwargs) -> "UserStore":
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return cls(f"sqlite:///{path}", **kwargs)

    def init_schema(self) -> None:
        """Create the users table if it is not there yet."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise StoreError("Could not initialise the database") from exc
        logger.info("Schema ready at %s", self.url)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if _is_email_conflict(exc):
                raise ConstraintError(field="email") from exc
            raise StoreError() from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError() from exc
        finally:
            db.close()

    # ------------------ Reads ------------------

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        with self._session() as db:
            row = db.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
            if row is None:
                return None
            return UserRecord(
                id=row.id,
                name=row.name,
                email=row.email,
                password_hash=row.password_hash,
                bio=row.bio,
                created_at=row.created_at,
            )

    def find_by_id(self, user_id: int) -> Optional[Profile]:
        with self._session() as db:
            row = db.execute(
                select(UserRow.id, UserRow.name, UserRow.email, UserRow.bio, UserRow.created_at).where(
                    UserRow.id == user_id
                )
            ).one_or_none()
            if row is None:
                return None
            return Profile(id=row.id, name=row.name, email=row.email, bio=row.bio, created_at=row.created_at)

    def list_others(self, exclude_id: int, limit: int = MATCH_LIMIT) -> List[Match]:
        """Everyone but exclude_id, newest registration first."""
        with self._session() as db:
            rows = db.execute(
                select(UserRow.name, UserRow.bio)
                .where(UserRow.id != exclude_id)
                # created_at has second resolution; id keeps same-second signups in order
                .order_by(UserRow.created_at.desc(), UserRow.id.desc())
                .limit(max(0, int(limit)))
            ).all()
            return [Match(name=r.name, bio=r.bio) for r in rows]

    # ------------------ Writes ------------------

    def insert(self, name: str, email: str, password_hash: str, bio: str) -> int:
        with self._session() as db:
            row = UserRow(name=name, email=email, password_hash=password_hash, bio=bio)
            db.add(row)
            db.flush()
            new_id = row.id
        return int(new_id)

    def update(self, user_id: int, name: str, bio: str) -> None:
        with self._session() as db:
            res = db.execute(update(UserRow).where(UserRow.id == user_id).values(name=name, bio=bio))
            if res.rowcount == 0:
                raise NotFoundError()

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        with self._session() as db:
            res = db.execute(update(UserRow).where(UserRow.id == user_id).values(password_hash=password_hash))
            if res.rowcount == 0:
                raise NotFoundError()
