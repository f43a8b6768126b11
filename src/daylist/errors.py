# src/daylist/errors.py

from __future__ import annotations


class DaylistError(Exception):
    """Base class for errors raised by daylist adapters."""


class BackendError(DaylistError):
    """A row-store request failed (transport, validation or authorization)."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class AuthError(DaylistError):
    """Sign-in / sign-up rejected by the auth service."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class NotSignedInError(DaylistError):
    def __init__(self, message: str = "Not signed in") -> None:
        super().__init__(message)
