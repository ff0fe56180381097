"""FastAPI application exposing the users resource."""
from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Response, status

from .config import Settings, load_settings
from .database import Database
from .handlers import register_error_handlers
from .schemas import UserRequest, UserResponse
from .service import UserService


def create_app(
    *,
    database: Database | None = None,
    service: UserService | None = None,
    settings: Settings | None = None,
    initialize_database: bool = True,
) -> FastAPI:
    """Build the API application.

    A ready-made *service* takes precedence over *database*; when neither is
    given the database configured in *settings* is opened.
    """

    if settings is None:
        settings = load_settings()

    if service is None:
        if database is None:
            database = Database(settings.database_path)
        if initialize_database:
            database.initialize()
        service = UserService(database)

    app = FastAPI(
        title="User Service",
        description="CRUD API for user records",
        version="1.0.0",
    )
    app.state.database = database
    app.state.service = service
    app.state.settings = settings

    def get_service() -> UserService:
        return service

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    router = APIRouter(prefix="/users", tags=["users"])

    @router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def create_user(
        payload: UserRequest,
        users: UserService = Depends(get_service),
    ) -> UserResponse:
        return users.create_user(payload)

    @router.get("", response_model=List[UserResponse])
    async def list_users(users: UserService = Depends(get_service)) -> List[UserResponse]:
        return users.list_users()

    @router.get("/{user_id}", response_model=UserResponse)
    async def read_user(user_id: int, users: UserService = Depends(get_service)) -> UserResponse:
        return users.get_user(user_id)

    @router.put("/{user_id}", response_model=UserResponse)
    async def update_user(
        user_id: int,
        payload: UserRequest,
        users: UserService = Depends(get_service),
    ) -> UserResponse:
        return users.update_user(user_id, payload)

    @router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(user_id: int, users: UserService = Depends(get_service)) -> Response:
        users.delete_user(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(router, prefix=_normalise_prefix(settings.api_prefix))
    register_error_handlers(app)

    return app


def _normalise_prefix(prefix: Optional[str]) -> str:
    if not prefix:
        return ""
    cleaned = "/" + prefix.strip().strip("/")
    return "" if cleaned == "/" else cleaned


__all__ = ["create_app"]
