"""Unit tests for insurance_api.services.auth with mocked store and real hasher/tokens."""

import unittest
from datetime import date
from unittest.mock import MagicMock

from pymongo.errors import ServerSelectionTimeoutError

from insurance_api.core.config import Settings
from insurance_api.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from insurance_api.core.security import PasswordHasher, TokenService
from insurance_api.models.user import Address, Role, User
from insurance_api.repositories.users import DuplicateEmailError
from insurance_api.schemas.auth import LoginRequest, RegisterRequest
from insurance_api.services import auth as auth_service

USER_ID = "65c123456789abcdef012345"


def _user(**overrides: object) -> User:
    values: dict = {
        "id": USER_ID,
        "name": "Jane Doe",
        "email": "jane@ex.com",
        "phone": "9876543210",
        "date_of_birth": date(1990, 1, 1),
        "address": Address(street="1 Rd", city="C", state="S", zip_code="123456"),
    }
    values.update(overrides)
    return User(**values)


def _register_request() -> RegisterRequest:
    return RegisterRequest.model_validate(
        {
            "name": "Jane Doe",
            "email": "JANE@EX.com",
            "password": "Abcdef1",
            "phone": "9876543210",
            "dateOfBirth": "1990-01-01",
            "address": {"street": "1 Rd", "city": "C", "state": "S", "zipCode": "123456"},
        }
    )


class ServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.users = MagicMock()
        self.hasher = PasswordHasher(rounds=4)
        self.tokens = TokenService(Settings(JWT_SECRET="service-test-secret"))


class TestRegister(ServiceTestCase):
    def test_hashes_before_insert_and_issues_token(self) -> None:
        self.users.find_by_email.return_value = None
        self.users.insert.return_value = _user()

        token, user = auth_service.register(_register_request(), self.users, self.hasher, self.tokens)

        doc = self.users.insert.call_args.args[0]
        self.assertEqual(doc["email"], "jane@ex.com")
        self.assertNotIn("password", doc)
        self.assertTrue(self.hasher.verify("Abcdef1", doc["password_hash"]))
        self.assertEqual(doc["role"], "customer")
        self.assertEqual(self.tokens.verify(token).user_id, USER_ID)
        self.assertEqual(user.id, USER_ID)

    def test_existing_email_conflicts(self) -> None:
        self.users.find_by_email.return_value = _user()
        with self.assertRaises(ConflictError) as ctx:
            auth_service.register(_register_request(), self.users, self.hasher, self.tokens)
        self.assertEqual(ctx.exception.status_code, 400)
        self.users.insert.assert_not_called()

    def test_unique_index_race_conflicts(self) -> None:
        self.users.find_by_email.return_value = None
        self.users.insert.side_effect = DuplicateEmailError("jane@ex.com")
        with self.assertRaises(ConflictError):
            auth_service.register(_register_request(), self.users, self.hasher, self.tokens)

    def test_store_failure_is_internal_error(self) -> None:
        self.users.find_by_email.side_effect = ServerSelectionTimeoutError("down")
        with self.assertRaises(InternalError) as ctx:
            auth_service.register(_register_request(), self.users, self.hasher, self.tokens)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIsInstance(ctx.exception.__cause__, ServerSelectionTimeoutError)


class TestCreateAccount(ServiceTestCase):
    def test_inserts_hashed_user_without_issuing_token(self) -> None:
        self.users.find_by_email.return_value = None
        self.users.insert.return_value = _user(role=Role.ADMIN)

        user = auth_service.create_account(_register_request(), self.users, self.hasher)

        self.assertEqual(user.id, USER_ID)
        doc = self.users.insert.call_args.args[0]
        self.assertTrue(self.hasher.verify("Abcdef1", doc["password_hash"]))

    def test_existing_email_conflicts(self) -> None:
        self.users.find_by_email.return_value = _user()
        with self.assertRaises(ConflictError):
            auth_service.create_account(_register_request(), self.users, self.hasher)
        self.users.insert.assert_not_called()


class TestLogin(ServiceTestCase):
    def _request(self, password: str = "Abcdef1") -> LoginRequest:
        return LoginRequest(email="jane@ex.com", password=password)

    def test_success(self) -> None:
        self.users.find_by_email.return_value = _user(password_hash=self.hasher.hash("Abcdef1"))
        token, user = auth_service.login(self._request(), self.users, self.hasher, self.tokens)
        self.assertEqual(self.tokens.verify(token).user_id, USER_ID)
        self.users.find_by_email.assert_called_once_with("jane@ex.com", include_password=True)

    def test_unknown_email_and_wrong_password_share_message(self) -> None:
        self.users.find_by_email.return_value = None
        with self.assertRaises(UnauthorizedError) as unknown:
            auth_service.login(self._request(), self.users, self.hasher, self.tokens)

        self.users.find_by_email.return_value = _user(password_hash=self.hasher.hash("Abcdef1"))
        with self.assertRaises(UnauthorizedError) as wrong:
            auth_service.login(self._request("Wrong123"), self.users, self.hasher, self.tokens)

        self.assertEqual(unknown.exception.message, "Invalid email or password")
        self.assertEqual(wrong.exception.message, unknown.exception.message)

    def test_deactivated_account(self) -> None:
        self.users.find_by_email.return_value = _user(
            password_hash=self.hasher.hash("Abcdef1"), is_active=False
        )
        with self.assertRaises(UnauthorizedError) as ctx:
            auth_service.login(self._request(), self.users, self.hasher, self.tokens)
        self.assertEqual(ctx.exception.message, "Account is deactivated. Please contact support.")


class TestAuthenticate(ServiceTestCase):
    def test_missing_token(self) -> None:
        with self.assertRaises(UnauthorizedError) as ctx:
            auth_service.authenticate(None, self.users, self.tokens)
        self.assertEqual(ctx.exception.message, "Not authorized, no token provided")
        self.users.find_by_id.assert_not_called()

    def test_invalid_token(self) -> None:
        with self.assertRaises(UnauthorizedError) as ctx:
            auth_service.authenticate("garbage", self.users, self.tokens)
        self.assertEqual(ctx.exception.message, "Invalid token")

    def test_unknown_user(self) -> None:
        self.users.find_by_id.return_value = None
        with self.assertRaises(UnauthorizedError) as ctx:
            auth_service.authenticate(self.tokens.issue(USER_ID), self.users, self.tokens)
        self.assertEqual(ctx.exception.message, "User not found")

    def test_deactivated_user_with_valid_token(self) -> None:
        self.users.find_by_id.return_value = _user(is_active=False)
        with self.assertRaises(UnauthorizedError) as ctx:
            auth_service.authenticate(self.tokens.issue(USER_ID), self.users, self.tokens)
        self.assertEqual(ctx.exception.message, "Account is deactivated")

    def test_active_user(self) -> None:
        self.users.find_by_id.return_value = _user()
        user = auth_service.authenticate(self.tokens.issue(USER_ID), self.users, self.tokens)
        self.assertEqual(user.id, USER_ID)
        self.users.find_by_id.assert_called_once_with(USER_ID)

    def test_store_failure(self) -> None:
        self.users.find_by_id.side_effect = ServerSelectionTimeoutError("down")
        with self.assertRaises(InternalError) as ctx:
            auth_service.authenticate(self.tokens.issue(USER_ID), self.users, self.tokens)
        self.assertEqual(ctx.exception.message, "Server error in authentication")


class TestAuthorize(unittest.TestCase):
    def test_customer_rejected_from_admin_route(self) -> None:
        with self.assertRaises(ForbiddenError) as ctx:
            auth_service.authorize(Role.CUSTOMER, [Role.ADMIN])
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertIn("'customer'", ctx.exception.message)

    def test_admin_allowed(self) -> None:
        auth_service.authorize(Role.ADMIN, [Role.ADMIN])

    def test_accepts_plain_strings(self) -> None:
        auth_service.authorize("agent", ["admin", "agent"])


class TestProfileAndPassword(ServiceTestCase):
    def test_profile_vanished(self) -> None:
        self.users.find_by_id.return_value = None
        with self.assertRaises(NotFoundError):
            auth_service.get_current_profile(USER_ID, self.users)

    def test_set_password_hashes_new_plaintext(self) -> None:
        self.users.set_password_hash.return_value = True
        auth_service.set_password(USER_ID, "Newpass1", self.users, self.hasher)
        user_id, digest = self.users.set_password_hash.call_args.args
        self.assertEqual(user_id, USER_ID)
        self.assertTrue(self.hasher.verify("Newpass1", digest))

    def test_set_password_unknown_user(self) -> None:
        self.users.set_password_hash.return_value = False
        with self.assertRaises(NotFoundError):
            auth_service.set_password(USER_ID, "Newpass1", self.users, self.hasher)


if __name__ == "__main__":
    unittest.main()
