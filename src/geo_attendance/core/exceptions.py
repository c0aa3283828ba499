from __future__ import annotations

from .enums import LocationErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when caller input is invalid."""


class StateDecodeError(DomainError, ValueError):
    """Raised when a persisted attendance blob cannot be decoded."""


class LocationError(DomainError):
    """Raised by position providers when no sample can be obtained."""

    def __init__(self, kind: LocationErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
