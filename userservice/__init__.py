"""Core package for the user management service."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path
from .errors import (
    BusinessRuleViolation,
    NotFound,
    StorageError,
    UserServiceError,
    ValidationFailed,
)


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the users API application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "BusinessRuleViolation",
    "Database",
    "NotFound",
    "StorageError",
    "UserServiceError",
    "ValidationFailed",
    "create_app",
    "resolve_database_path",
]
