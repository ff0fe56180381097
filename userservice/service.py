"""Business operations for managing user records."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from .errors import BusinessRuleViolation, NotFound, ValidationFailed
from .models import User
from .schemas import UserRequest, UserResponse, user_to_response
from .validation import ensure_valid

logger = logging.getLogger("userservice.service")


class UserStore(Protocol):
    """Persistence operations the service relies on."""

    def find_by_id(self, user_id: int) -> Optional[User]: ...

    def find_all(self) -> List[User]: ...

    def save(self, user: User) -> User: ...

    def delete_by_id(self, user_id: int) -> bool: ...

    def exists_by_id(self, user_id: int) -> bool: ...

    def exists_by_email(self, email: str) -> bool: ...


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _duplicate_email(email: str) -> BusinessRuleViolation:
    return BusinessRuleViolation(f"User with email {email} already exists")


def _not_found(user_id: int) -> NotFound:
    return NotFound(f"User not found with id: {user_id}")


class UserService:
    """Create, read, update and delete users while keeping emails unique."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    def create_user(self, request: UserRequest) -> UserResponse:
        self._validate(request)

        if self._store.exists_by_email(request.email):
            logger.warning("Rejected user creation: email %s already registered", request.email)
            raise _duplicate_email(request.email)

        user = User(
            id=None,
            name=request.name,
            email=request.email,
            age=request.age,
            created_at=_current_timestamp(),
        )
        saved = self._store.save(user)
        logger.info("Created user %s <%s>", saved.id, saved.email)
        return user_to_response(saved)

    def list_users(self) -> List[UserResponse]:
        return [user_to_response(user) for user in self._store.find_all()]

    def get_user(self, user_id: int) -> UserResponse:
        user = self._store.find_by_id(user_id)
        if user is None:
            raise _not_found(user_id)
        return user_to_response(user)

    def update_user(self, user_id: int, request: UserRequest) -> UserResponse:
        """Replace the name, email and age of an existing user.

        The identifier and creation timestamp are carried over unchanged. The
        uniqueness check only runs when the email actually changes, so a user
        can be saved again with their current address.
        """

        existing = self._store.find_by_id(user_id)
        if existing is None:
            raise _not_found(user_id)

        self._validate(request)

        if request.email != existing.email and self._store.exists_by_email(request.email):
            logger.warning(
                "Rejected update of user %s: email %s already registered", user_id, request.email
            )
            raise _duplicate_email(request.email)

        updated = replace(existing, name=request.name, email=request.email, age=request.age)
        saved = self._store.save(updated)
        logger.info("Updated user %s", saved.id)
        return user_to_response(saved)

    def delete_user(self, user_id: int) -> None:
        if not self._store.exists_by_id(user_id):
            raise _not_found(user_id)
        self._store.delete_by_id(user_id)
        logger.info("Deleted user %s", user_id)

    @staticmethod
    def _validate(request: UserRequest) -> None:
        try:
            ensure_valid(request)
        except ValidationFailed as exc:
            logger.warning("Rejected invalid user request: %s", exc.errors)
            raise


__all__ = ["UserService", "UserStore"]
