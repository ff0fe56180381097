"""Error types raised by the user service."""

from __future__ import annotations

from typing import Dict, Mapping


class UserServiceError(Exception):
    """Base class for failures surfaced by the service layer."""


class ValidationFailed(UserServiceError):
    """One or more request fields violate their constraints."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Validation failed for: {fields}")


class BusinessRuleViolation(UserServiceError):
    """The request is well formed but breaks a business rule."""


class NotFound(UserServiceError):
    """No record matches the requested identifier."""


class StorageError(UserServiceError):
    """The record store could not complete an operation."""


__all__ = [
    "BusinessRuleViolation",
    "NotFound",
    "StorageError",
    "UserServiceError",
    "ValidationFailed",
]
