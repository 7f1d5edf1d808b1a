"""
Create a user with any role (e.g. the first admin or an agent), or reset a
user's password. Run from project root:
  python -m insurance_api.scripts.create_user create NAME EMAIL PASSWORD PHONE DOB STREET CITY STATE ZIP [--role admin]
  python -m insurance_api.scripts.create_user set-password EMAIL NEW_PASSWORD
Example:
  python -m insurance_api.scripts.create_user create "Ada Admin" admin@example.com 'S3cret!pw' \\
      9876543210 1985-04-12 "1 Main Rd" Pune MH 411001 --role admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError as SchemaValidationError
from pymongo.errors import PyMongoError

from insurance_api.core.config import get_settings
from insurance_api.core.database import get_users_collection
from insurance_api.core.exceptions import AppError
from insurance_api.core.logging import configure_logging
from insurance_api.core.security import PasswordHasher
from insurance_api.models.user import Role
from insurance_api.repositories.users import UserRepository
from insurance_api.schemas.auth import PASSWORD_COMPLEXITY, PASSWORD_MIN_LEN, RegisterRequest
from insurance_api.services import auth as auth_service

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage Insurance API users from the shell.")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a user with any role")
    create.add_argument("name")
    create.add_argument("email")
    create.add_argument("password")
    create.add_argument("phone", help="10 digits")
    create.add_argument("date_of_birth", help="YYYY-MM-DD")
    create.add_argument("street")
    create.add_argument("city")
    create.add_argument("state")
    create.add_argument("zip_code", help="6 digits")
    create.add_argument("--role", default=Role.CUSTOMER.value, choices=[r.value for r in Role])

    reset = sub.add_parser("set-password", help="Replace a user's password")
    reset.add_argument("email")
    reset.add_argument("new_password")
    return parser


def _create(args: argparse.Namespace, users: UserRepository, hasher: PasswordHasher) -> int:
    try:
        data = RegisterRequest(
            name=args.name,
            email=args.email,
            password=args.password,
            phone=args.phone,
            date_of_birth=args.date_of_birth,
            address={
                "street": args.street,
                "city": args.city,
                "state": args.state,
                "zip_code": args.zip_code,
            },
            role=args.role,
        )
    except SchemaValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"{field}: {err['msg']}", file=sys.stderr)
        return 1

    user = auth_service.create_account(data, users, hasher)
    print(f"Created user '{user.email}' (id {user.id}) with role '{user.role.value}'.")
    return 0


def _set_password(args: argparse.Namespace, users: UserRepository, hasher: PasswordHasher) -> int:
    if len(args.new_password) < PASSWORD_MIN_LEN or not PASSWORD_COMPLEXITY.match(args.new_password):
        print(
            "Password must be at least 6 characters with an uppercase letter, "
            "a lowercase letter and a number.",
            file=sys.stderr,
        )
        return 1
    user = users.find_by_email(args.email)
    if user is None:
        print(f"No user with email '{args.email}'.", file=sys.stderr)
        return 1
    auth_service.set_password(user.id, args.new_password, users, hasher)
    print(f"Password updated for '{user.email}'.")
    return 0


def main(argv: list[str] | None = None, users: UserRepository | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    users = users or UserRepository(get_users_collection())
    try:
        users.ensure_indexes()
    except PyMongoError as e:
        logger.error("Could not ensure user indexes: %s", e)
        return 1
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    try:
        if args.command == "create":
            return _create(args, users, hasher)
        return _set_password(args, users, hasher)
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    except PyMongoError as e:
        logger.exception("Database error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
