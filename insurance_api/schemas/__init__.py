"""Pydantic request/response schemas."""

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
from insurance_api.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MeResponse",
    "RegisterRequest",
    "UserProfile",
    "UserSummary",
    "UsersListResponse",
]
