"""Unit tests for the user management service with a substituted store."""

from __future__ import annotations

import unittest
from dataclasses import replace
from datetime import datetime, timezone
from unittest import mock

from userservice.database import Database
from userservice.errors import BusinessRuleViolation, NotFound, StorageError, ValidationFailed
from userservice.models import User
from userservice.schemas import UserRequest
from userservice.service import UserService


def _stored_user(**overrides) -> User:
    values = dict(
        id=1,
        name="John Doe",
        email="john.doe@example.com",
        age=30,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return User(**values)


class UserServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = mock.Mock(spec=Database)
        self.service = UserService(self.store)
        self.user = _stored_user()
        self.request = UserRequest(name="John Doe", email="john.doe@example.com", age=30)

    def test_create_user_with_valid_data_returns_projection(self) -> None:
        self.store.exists_by_email.return_value = False
        self.store.save.side_effect = lambda user: replace(user, id=1)

        result = self.service.create_user(self.request)

        self.assertEqual(result.id, 1)
        self.assertEqual(result.name, "John Doe")
        self.assertEqual(result.email, "john.doe@example.com")
        self.assertEqual(result.age, 30)
        self.assertIsNotNone(result.created_at.tzinfo)

        self.store.exists_by_email.assert_called_once_with("john.doe@example.com")
        saved = self.store.save.call_args.args[0]
        self.assertIsNone(saved.id)
        self.assertEqual(saved.name, "John Doe")

    def test_create_user_with_duplicate_email_raises(self) -> None:
        self.store.exists_by_email.return_value = True

        with self.assertRaises(BusinessRuleViolation) as ctx:
            self.service.create_user(self.request)

        self.assertEqual(str(ctx.exception), "User with email john.doe@example.com already exists")
        self.store.save.assert_not_called()

    def test_create_user_reports_every_invalid_field(self) -> None:
        invalid = UserRequest(name="", email="invalid-email", age=-5)

        with self.assertRaises(ValidationFailed) as ctx:
            self.service.create_user(invalid)

        self.assertEqual(set(ctx.exception.errors), {"name", "email", "age"})
        self.store.exists_by_email.assert_not_called()
        self.store.save.assert_not_called()

    def test_list_users_returns_projections_in_store_order(self) -> None:
        second = _stored_user(id=2, name="Jane Smith", email="jane@example.com", age=25)
        self.store.find_all.return_value = [self.user, second]

        result = self.service.list_users()

        self.assertEqual([user.name for user in result], ["John Doe", "Jane Smith"])
        self.store.find_all.assert_called_once_with()

    def test_list_users_on_empty_store_returns_empty_list(self) -> None:
        self.store.find_all.return_value = []
        self.assertEqual(self.service.list_users(), [])

    def test_get_user_with_valid_id(self) -> None:
        self.store.find_by_id.return_value = self.user

        result = self.service.get_user(1)

        self.assertEqual(result.id, 1)
        self.assertEqual(result.name, "John Doe")
        self.store.find_by_id.assert_called_once_with(1)

    def test_get_user_with_unknown_id_raises_not_found(self) -> None:
        self.store.find_by_id.return_value = None

        with self.assertRaises(NotFound) as ctx:
            self.service.get_user(999)

        self.assertEqual(str(ctx.exception), "User not found with id: 999")

    def test_update_user_keeps_identifier_and_creation_time(self) -> None:
        self.store.find_by_id.return_value = self.user
        self.store.exists_by_email.return_value = False
        self.store.save.side_effect = lambda user: user
        request = UserRequest(name="John Updated", email="john.updated@example.com", age=31)

        result = self.service.update_user(1, request)

        self.assertEqual(result.id, 1)
        self.assertEqual(result.name, "John Updated")
        self.assertEqual(result.email, "john.updated@example.com")
        self.assertEqual(result.age, 31)
        self.assertEqual(result.created_at, self.user.created_at)
        self.store.exists_by_email.assert_called_once_with("john.updated@example.com")

    def test_update_user_with_duplicate_email_raises(self) -> None:
        self.store.find_by_id.return_value = self.user
        self.store.exists_by_email.return_value = True
        request = UserRequest(name="John Updated", email="existing@example.com", age=31)

        with self.assertRaises(BusinessRuleViolation) as ctx:
            self.service.update_user(1, request)

        self.assertEqual(str(ctx.exception), "User with email existing@example.com already exists")
        self.store.save.assert_not_called()

    def test_update_user_keeping_own_email_skips_uniqueness_check(self) -> None:
        self.store.find_by_id.return_value = self.user
        self.store.save.side_effect = lambda user: user
        request = UserRequest(name="John Renamed", email="john.doe@example.com", age=30)

        result = self.service.update_user(1, request)

        self.assertEqual(result.name, "John Renamed")
        self.store.exists_by_email.assert_not_called()

    def test_update_unknown_user_raises_not_found_before_validation(self) -> None:
        self.store.find_by_id.return_value = None

        with self.assertRaises(NotFound):
            self.service.update_user(999, UserRequest(name="", email="bad", age=-1))

        self.store.save.assert_not_called()

    def test_update_user_with_invalid_data_raises_validation_failed(self) -> None:
        self.store.find_by_id.return_value = self.user

        with self.assertRaises(ValidationFailed) as ctx:
            self.service.update_user(1, UserRequest(name="  ", email="john.doe@example.com", age=None))

        self.assertEqual(ctx.exception.errors, {"name": "Name is required", "age": "Age is required"})
        self.store.save.assert_not_called()

    def test_delete_user_with_valid_id(self) -> None:
        self.store.exists_by_id.return_value = True

        self.service.delete_user(1)

        self.store.exists_by_id.assert_called_once_with(1)
        self.store.delete_by_id.assert_called_once_with(1)

    def test_delete_user_with_unknown_id_raises_not_found(self) -> None:
        self.store.exists_by_id.return_value = False

        with self.assertRaises(NotFound) as ctx:
            self.service.delete_user(999)

        self.assertEqual(str(ctx.exception), "User not found with id: 999")
        self.store.delete_by_id.assert_not_called()

    def test_storage_failures_propagate_unchanged(self) -> None:
        self.store.find_all.side_effect = StorageError("disk I/O error")

        with self.assertRaises(StorageError):
            self.service.list_users()


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
