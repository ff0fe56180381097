"""Domain models persisted by the user service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Represents a user record stored in the service database."""

    id: Optional[int]
    name: str
    email: str
    age: int
    created_at: datetime


__all__ = ["User"]
