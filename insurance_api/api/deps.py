"""Shared FastAPI dependencies: store, hasher, token service and auth gates."""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from insurance_api.core.config import get_settings
from insurance_api.core.database import get_users_collection
from insurance_api.core.security import PasswordHasher, TokenService
from insurance_api.models.user import Role
from insurance_api.repositories.users import UserRepository
from insurance_api.schemas.auth import CurrentUser
from insurance_api.services import auth as auth_service

security = HTTPBearer(auto_error=False)


@lru_cache
def get_user_repository() -> UserRepository:
    """One repository per process, so the email index is only ensured once."""
    return UserRepository(get_users_collection())


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(get_settings())


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> CurrentUser:
    """Dependency: require a valid Bearer JWT for an active user. Raises 401 otherwise."""
    token = credentials.credentials if credentials is not None else None
    user = auth_service.authenticate(token, users, tokens)
    current = CurrentUser(id=user.id, name=user.name, email=user.email, role=user.role)
    request.state.current_user = current
    return current


def require_roles(*roles: Role | str) -> Callable[..., CurrentUser]:
    """
    Build a dependency that authenticates first, then checks the caller's role.
    Raises 403 when the role is not in roles.
    """
    allowed = tuple(Role(r) for r in roles)

    def _require(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        auth_service.authorize(current_user.role, allowed)
        return current_user

    return _require


require_admin = require_roles(Role.ADMIN)
