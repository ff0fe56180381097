"""SQLite-backed persistence for user records."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import StorageError
from .models import User


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "userservice.sqlite3").resolve(strict=False)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


class Database:
    """Simple wrapper around SQLite for persisting users."""

    def __init__(self, path: Path) -> None:
        try:
            _ensure_directory(path)
        except OSError as exc:
            raise StorageError(f"Cannot create database directory for {path}: {exc}") from exc
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        try:
            with conn:
                yield conn
        except (sqlite3.Error, OverflowError) as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the users table if it does not already exist."""

        with self._transaction() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    age INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                );
                """
            )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def find_all(self) -> List[User]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def exists_by_id(self, user_id: int) -> bool:
        with self._transaction() as conn:
            row = conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
        return row is not None

    def exists_by_email(self, email: str) -> bool:
        with self._transaction() as conn:
            row = conn.execute("SELECT 1 FROM users WHERE email = ?", (email,)).fetchone()
        return row is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def save(self, user: User) -> User:
        """Insert *user* when it has no id yet, otherwise update it in place.

        ``created_at`` is written on insert only.
        """

        if user.id is None:
            return self._insert(user)
        return self._update(user)

    def _insert(self, user: User) -> User:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (name, email, age, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (user.name, user.email, user.age, _serialize_datetime(user.created_at)),
            )
            user_id = cursor.lastrowid

        return User(
            id=user_id,
            name=user.name,
            email=user.email,
            age=user.age,
            created_at=user.created_at,
        )

    def _update(self, user: User) -> User:
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE users SET name = ?, email = ?, age = ? WHERE id = ?",
                (user.name, user.email, user.age, user.id),
            )
            if cursor.rowcount == 0:
                raise StorageError(f"No row to update for id {user.id}")

        refreshed = self.find_by_id(user.id)  # type: ignore[arg-type]
        if refreshed is None:  # pragma: no cover - row deleted between statements
            raise StorageError(f"No row to update for id {user.id}")
        return refreshed

    def delete_by_id(self, user_id: int) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cursor.rowcount > 0

    def delete_all(self) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM users")

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            age=row["age"],
            created_at=_parse_datetime(row["created_at"]),
        )


__all__ = ["Database", "resolve_database_path"]
