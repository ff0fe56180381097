"""Wire-level request and response shapes for the users API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import User


class UserRequest(BaseModel):
    """Body accepted by the create and update endpoints.

    Fields are optional at the parsing level; presence, format and range are
    checked by :mod:`userservice.validation` so every violation is reported.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    email: str
    age: int
    created_at: datetime = Field(alias="createdAt")


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        age=user.age,
        created_at=user.created_at,
    )


__all__ = ["UserRequest", "UserResponse", "user_to_response"]
