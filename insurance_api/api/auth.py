"""Register, login, current-user profile and the admin user listing."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from insurance_api.api.deps import (
    get_current_user,
    get_password_hasher,
    get_token_service,
    get_user_repository,
    require_admin,
)
from insurance_api.core.security import PasswordHasher, TokenService
from insurance_api.repositories.users import UserRepository
from insurance_api.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserProfile,
    UsersListResponse,
    UserSummary,
)
from insurance_api.services import auth as auth_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthResponse:
    """
    Register a new account; returns a JWT and the public user summary.
    Role defaults to customer.
    """
    token, user = auth_service.register(body, users, hasher, tokens)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserSummary.from_user(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    token, user = auth_service.login(body, users, hasher, tokens)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserSummary.from_user(user),
    )


@router.get("/me", response_model=MeResponse)
def get_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> MeResponse:
    """Full profile of the authenticated user."""
    user = auth_service.get_current_profile(current_user.id, users)
    return MeResponse(user=UserProfile.from_user(user))


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> UsersListResponse:
    """List all users (admin only)."""
    all_users = users.list_all()
    return UsersListResponse(
        count=len(all_users),
        users=[UserSummary.from_user(u) for u in all_users],
    )
