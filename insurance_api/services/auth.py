"""
Authentication flow: registration, login, profile lookup, token gating and
role checks. Raises application errors; HTTP rendering lives in the API layer.

Store failures (PyMongoError) are converted to InternalError here, at the
operation boundary, with a generic message. Nothing is retried.
"""

import logging
from collections.abc import Iterable

from pymongo.errors import PyMongoError

from insurance_api.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from insurance_api.core.security import Expired, PasswordHasher, TokenError, TokenService
from insurance_api.models.user import Role, User, new_user_document
from insurance_api.repositories.users import DuplicateEmailError, UserRepository
from insurance_api.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

USER_EXISTS = "User already exists with this email"
INVALID_CREDENTIALS = "Invalid email or password"
LOGIN_DEACTIVATED = "Account is deactivated. Please contact support."
NO_TOKEN = "Not authorized, no token provided"
INVALID_TOKEN = "Invalid token"
TOKEN_EXPIRED = "Token expired, please login again"
USER_NOT_FOUND = "User not found"
ACCOUNT_DEACTIVATED = "Account is deactivated"


def create_account(
    data: RegisterRequest,
    users: UserRepository,
    hasher: PasswordHasher,
) -> User:
    """Hash the password and insert the user. Raises ConflictError on a taken email."""
    try:
        if users.find_by_email(data.email) is not None:
            raise ConflictError(USER_EXISTS)
        document = new_user_document(
            name=data.name,
            email=data.email,
            password_hash=hasher.hash(data.password),
            phone=data.phone,
            date_of_birth=data.date_of_birth,
            address=data.address.to_address(),
            role=data.role,
        )
        user = users.insert(document)
    except DuplicateEmailError as exc:
        # Lost a race with a concurrent registration for the same email.
        raise ConflictError(USER_EXISTS) from exc
    except PyMongoError as exc:
        logger.exception("Store error during registration")
        raise InternalError("Server error during registration") from exc

    logger.info("Registered user id=%s role=%s", user.id, user.role.value)
    return user


def register(
    data: RegisterRequest,
    users: UserRepository,
    hasher: PasswordHasher,
    tokens: TokenService,
) -> tuple[str, User]:
    """Create a user from an already-validated payload; return (token, user)."""
    user = create_account(data, users, hasher)
    return tokens.issue(user.id), user


def login(
    data: LoginRequest,
    users: UserRepository,
    hasher: PasswordHasher,
    tokens: TokenService,
) -> tuple[str, User]:
    """
    Verify credentials and return (token, user).
    Unknown email and wrong password share one message.
    """
    try:
        user = users.find_by_email(data.email, include_password=True)
    except PyMongoError as exc:
        logger.exception("Store error during login")
        raise InternalError("Server error during login") from exc

    if user is None:
        logger.info("Login rejected: unknown email")
        raise UnauthorizedError(INVALID_CREDENTIALS)
    if not user.is_active:
        logger.info("Login rejected: user id=%s is deactivated", user.id)
        raise UnauthorizedError(LOGIN_DEACTIVATED)
    if not user.password_hash or not hasher.verify(data.password, user.password_hash):
        logger.info("Login rejected: bad password for user id=%s", user.id)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    return tokens.issue(user.id), user


def get_current_profile(user_id: str, users: UserRepository) -> User:
    """Reload the caller's full profile (without the digest)."""
    try:
        user = users.find_by_id(user_id)
    except PyMongoError as exc:
        logger.exception("Store error loading profile")
        raise InternalError("Server error") from exc
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user


def authenticate(token: str | None, users: UserRepository, tokens: TokenService) -> User:
    """
    Resolve a bearer token to an active user. Steps stop at the first failure:
    missing token, bad/expired token, unknown user, deactivated account.
    """
    if not token:
        raise UnauthorizedError(NO_TOKEN)
    try:
        claims = tokens.verify(token)
    except Expired as exc:
        raise UnauthorizedError(TOKEN_EXPIRED) from exc
    except TokenError as exc:
        logger.info("Rejected token: %s", exc)
        raise UnauthorizedError(INVALID_TOKEN) from exc

    try:
        user = users.find_by_id(claims.user_id)
    except PyMongoError as exc:
        logger.exception("Store error during authentication")
        raise InternalError("Server error in authentication") from exc

    if user is None:
        raise UnauthorizedError(USER_NOT_FOUND)
    if not user.is_active:
        raise UnauthorizedError(ACCOUNT_DEACTIVATED)
    return user


def authorize(role: Role | str, allowed_roles: Iterable[Role | str]) -> None:
    """Raise ForbiddenError unless role is one of allowed_roles."""
    role_value = Role(role).value
    allowed = {Role(r).value for r in allowed_roles}
    if role_value not in allowed:
        raise ForbiddenError(f"User role '{role_value}' is not authorized to access this route")


def set_password(
    user_id: str,
    new_password: str,
    users: UserRepository,
    hasher: PasswordHasher,
) -> None:
    """Hash a new plaintext and store it. The only path that rehashes a password."""
    if not users.set_password_hash(user_id, hasher.hash(new_password)):
        raise NotFoundError(USER_NOT_FOUND)
    logger.info("Password changed for user id=%s", user_id)
