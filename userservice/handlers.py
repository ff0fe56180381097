"""Translate service failures into the JSON error envelope."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import UserServiceError, ValidationFailed

logger = logging.getLogger("userservice.api")


def validation_error_response(errors: Mapping[str, str]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": status.HTTP_400_BAD_REQUEST, "errors": dict(errors)},
    )


def message_error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": status.HTTP_400_BAD_REQUEST, "message": message},
    )


def _field_from_location(location: Iterable[object]) -> str:
    parts = [str(part) for part in location if not isinstance(part, int)]
    return parts[-1] if parts else "body"


def request_errors_to_fields(errors: Iterable[Mapping[str, object]]) -> Dict[str, str]:
    """Collapse FastAPI parsing errors into a field -> message mapping."""

    fields: Dict[str, str] = {}
    for error in errors:
        field = _field_from_location(error.get("loc", ()))  # type: ignore[arg-type]
        fields.setdefault(field, str(error.get("msg", "Invalid value")))
    return fields


def register_error_handlers(app: FastAPI) -> None:
    """Install the process-wide error translation rules on *app*."""

    @app.exception_handler(ValidationFailed)
    async def handle_validation_failed(_: Request, exc: ValidationFailed) -> JSONResponse:
        return validation_error_response(exc.errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        return validation_error_response(request_errors_to_fields(exc.errors()))

    @app.exception_handler(UserServiceError)
    async def handle_service_error(_: Request, exc: UserServiceError) -> JSONResponse:
        return message_error_response(str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
        return message_error_response(str(exc))


__all__ = [
    "message_error_response",
    "register_error_handlers",
    "request_errors_to_fields",
    "validation_error_response",
]
