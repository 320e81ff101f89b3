"""
services/exceptions.py – Structured exception hierarchy and tagged results.

All service-level errors derive from PokedexError so callers can catch broadly
or specifically depending on context.  Repository boundaries (the catalogue
client and the auth repository) never let these escape: they wrap outcomes in
a Result so view-models only ever fold values into state.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class PokedexError(Exception):
    """Base class for all Pokédex client exceptions."""


# ── Authentication ────────────────────────────────────────────────────────────


class EmptyCredentials(PokedexError):
    """Raised when the login form is submitted with a blank field."""

    def __init__(self, message: str = "Username and password cannot be empty") -> None:
        super().__init__(message)


class InvalidCredentials(PokedexError):
    """Raised when no identity matches the submitted email and password."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class DuplicateEmail(PokedexError):
    """Raised when registering an email that already has an identity."""

    def __init__(self, message: str = "Email already registered") -> None:
        super().__init__(message)


class ValidationError(PokedexError):
    """
    Raised when a registration field fails local validation.

    Attributes
    ----------
    field : Name of the offending form field (e.g. "email").
    rule  : Short rule identifier (e.g. "min_length").
    """

    def __init__(self, field: str, rule: str, message: str) -> None:
        self.field = field
        self.rule = rule
        super().__init__(message)


# ── Remote catalogue ──────────────────────────────────────────────────────────


class NetworkError(PokedexError):
    """Raised when the catalogue cannot be reached (DNS, connect, timeout…)."""


class RemoteError(PokedexError):
    """
    Raised when the catalogue answers with an unusable response.

    Attributes
    ----------
    status : HTTP status code of the offending response.
    """

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        super().__init__(message or f"Catalogue server returned HTTP {status}.")


class NotFound(RemoteError):
    """Raised when the requested catalogue entry does not exist."""

    def __init__(self, message: str = "Pokémon not found.") -> None:
        super().__init__(404, message)


# ── Local storage ─────────────────────────────────────────────────────────────


class StorageFault(PokedexError):
    """Raised on any database or preference-file error."""


# ── Tagged outcome ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Success/failure outcome returned across repository boundaries.

    Exactly one of *value* (on success) or *error* (on failure) is meaningful.
    """

    value: Optional[T] = None
    error: Optional[PokedexError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PokedexError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        """Human-readable failure message, or None on success."""
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__
