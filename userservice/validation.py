"""Constraint checks applied to inbound user requests."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Protocol, Tuple

from .errors import ValidationFailed

_EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+")
MAX_AGE = 2_147_483_647

NAME_REQUIRED = "Name is required"
EMAIL_REQUIRED = "Email is required"
EMAIL_INVALID = "Email should be valid"
AGE_REQUIRED = "Age is required"
AGE_NEGATIVE = "Age must be greater than or equal to 0"
AGE_TOO_LARGE = f"Age must be less than or equal to {MAX_AGE}"


class UserFields(Protocol):
    name: Optional[str]
    email: Optional[str]
    age: Optional[int]


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def is_valid_email(value: str) -> bool:
    """Return ``True`` when *value* has a ``local@domain`` shape."""

    return _EMAIL_PATTERN.fullmatch(value) is not None


def validate_user_request(request: UserFields) -> List[Tuple[str, str]]:
    """Return every ``(field, message)`` violation found in *request*.

    All rules are evaluated so that a single request can report problems with
    several fields at once. An empty list means the request is valid.
    """

    violations: List[Tuple[str, str]] = []

    if _is_blank(request.name):
        violations.append(("name", NAME_REQUIRED))

    if _is_blank(request.email):
        violations.append(("email", EMAIL_REQUIRED))
    elif not is_valid_email(request.email):  # type: ignore[arg-type]
        violations.append(("email", EMAIL_INVALID))

    if request.age is None:
        violations.append(("age", AGE_REQUIRED))
    elif request.age < 0:
        violations.append(("age", AGE_NEGATIVE))
    elif request.age > MAX_AGE:
        violations.append(("age", AGE_TOO_LARGE))

    return violations


def ensure_valid(request: UserFields) -> None:
    """Raise :class:`ValidationFailed` if *request* has any violations."""

    violations = validate_user_request(request)
    if not violations:
        return
    errors: Dict[str, str] = {}
    for field, message in violations:
        errors.setdefault(field, message)
    raise ValidationFailed(errors)


__all__ = [
    "AGE_NEGATIVE",
    "AGE_REQUIRED",
    "AGE_TOO_LARGE",
    "EMAIL_INVALID",
    "EMAIL_REQUIRED",
    "MAX_AGE",
    "NAME_REQUIRED",
    "ensure_valid",
    "is_valid_email",
    "validate_user_request",
]
