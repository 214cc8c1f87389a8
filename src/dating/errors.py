# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Domain errors.

Every error carries the message that is safe to show to the visitor and the
HTTP status the page is rendered with. Infrastructure errors keep their cause
chained (``raise ... from exc``) for the logs only.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple


class DatingError(Exception):
    """Base class for every error a route handler is expected to recover from."""

    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DatingError):
    """A required form field is missing or blank.

    Attributes:
        fields: names of the offending fields, in form order.
    """

    status_code = 400
    default_message = "Please fill out all fields."

    def __init__(self, message: Optional[str] = None, fields: Iterable[str] = ()):
        self.fields: Tuple[str, ...] = tuple(fields)
        super().__init__(message)


class AuthError(DatingError):
    """Bad credentials. The message never says which part was wrong."""

    status_code = 401
    default_message = "Invalid email or password."


class ConstraintError(DatingError):
    """A uniqueness constraint of the store rejected the write.

    Attributes:
        field: column that collided (``"email"`` is the only unique one).
    """

    status_code = 400
    default_message = "That email is already registered."

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(DatingError):
    status_code = 404
    default_message = "We could not find that account."


class InfrastructureError(DatingError):
    """Disk, database or hashing failure. Details go to the log, not the page."""

    status_code = 500
    default_message = "Something went wrong. Please try again later."


class StoreError(InfrastructureError):
    pass
