"""Command-line interface for the user service."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Run `pip install -e .` to install dependencies."
    ) from exc

from userservice.config import Settings, load_settings
from userservice.database import Database
from userservice.errors import UserServiceError, ValidationFailed
from userservice.schemas import UserRequest
from userservice.service import UserService

logger = logging.getLogger("userservice.main")

_SUBCOMMANDS = {"serve", "init-db", "create-user", "list-users"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: USERSERVICE_CONFIG or config/userservice.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Initialise the user database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides configuration)")
    serve_parser.add_argument("--port", type=int, default=None, help="Listen port (overrides configuration)")

    create_parser = subparsers.add_parser("create-user", help="Create a user record")
    create_parser.add_argument("name", help="Display name for the user")
    create_parser.add_argument("email", help="Unique email address")
    create_parser.add_argument("age", type=int, help="Age in years")

    list_parser = subparsers.add_parser("list-users", help="Print all stored users")
    list_parser.add_argument(
        "--service-url",
        default=None,
        help="Query a running service instead of the local database",
    )

    args_list = list(sys.argv[1:] if argv is None else argv)
    if not any(arg in _SUBCOMMANDS for arg in args_list if not arg.startswith("-")):
        args_list = _insert_default_command(args_list)
    return parser.parse_args(args_list)


def _insert_default_command(args: list[str]) -> list[str]:
    """Place ``serve`` after the global options so serve flags still parse."""

    head: list[str] = []
    remaining = list(args)
    while remaining and remaining[0].startswith("--config"):
        width = 1 if remaining[0].startswith("--config=") else 2
        head.extend(remaining[:width])
        remaining = remaining[width:]
    return [*head, "serve", *remaining]


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, database: Database, settings: Settings, host: str | None, port: int | None) -> None:
    from userservice.api import create_app
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting user service on http://%s:%s%s", bind_host, bind_port, settings.api_prefix)

    app = create_app(database=database, settings=settings, initialize_database=False)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=settings.log_level.lower())


def _create_user(database: Database, name: str, email: str, age: int) -> int:
    service = UserService(database)
    try:
        user = service.create_user(UserRequest(name=name, email=email, age=age))
    except ValidationFailed as exc:
        for field, message in sorted(exc.errors.items()):
            print(f"{field}: {message}", file=sys.stderr)
        return 1
    except UserServiceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: {user.name} <{user.email}>")
    return 0


def _print_users(users: list[dict]) -> None:
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Name':<24}  {'Email':<32}  {'Age':>3}  Created")
    print("-" * 88)
    for user in users:
        print(
            f"{user['id']:>4}  {user['name']:<24}  {user['email']:<32}  "
            f"{user['age']:>3}  {user['createdAt']}"
        )


def _list_users(settings: Settings, service_url: str | None) -> int:
    if service_url is None:
        service = UserService(_initialise_database(settings))
        users = [user.model_dump(mode="json", by_alias=True) for user in service.list_users()]
        _print_users(users)
        return 0

    endpoint = service_url.rstrip("/") + "/users"
    try:
        response = httpx.get(endpoint, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact user service: {exc}", file=sys.stderr)
        return 1

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}", file=sys.stderr)
        return 1

    try:
        payload = response.json()
    except ValueError:
        print("Service returned an unexpected response format.", file=sys.stderr)
        return 1

    _print_users(payload)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = load_settings(Path(args.config) if args.config else None)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "list-users":
        return _list_users(settings, args.service_url)

    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(database=database, settings=settings, host=args.host, port=args.port)
    elif args.command == "create-user":
        return _create_user(database, args.name, args.email, args.age)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
