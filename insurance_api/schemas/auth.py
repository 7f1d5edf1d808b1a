"""
Request/response schemas for auth endpoints.

Required fields default to empty values and are validated anyway, so a
missing key and a blank value report the same field message.
"""

import re
from datetime import date, datetime
from typing import Any

from pydantic import Field, ValidationError, ValidatorFunctionWrapHandler, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from insurance_api.models.base import CamelModel
from insurance_api.models.user import Address, Role, User

NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
MIN_AGE_YEARS = 18

# ASCII classes only: str patterns would otherwise accept any Unicode digit.
PASSWORD_COMPLEXITY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])")
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
ZIP_CODE_PATTERN = re.compile(r"^[0-9]{6}$")


def age_on(birth: date, today: date) -> int:
    """Whole years between birth and today."""
    had_birthday = (today.month, today.day) >= (birth.month, birth.day)
    return today.year - birth.year - (0 if had_birthday else 1)


def _strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def _required() -> Any:
    return Field(default="", validate_default=True)


def _normalize_email(v: str) -> str:
    if not v:
        raise ValueError("Email is required")
    try:
        _, address = validate_email(v)
    except PydanticCustomError:
        raise ValueError("Please provide a valid email") from None
    return address.lower()


class AddressIn(CamelModel):
    street: str = _required()
    city: str = _required()
    state: str = _required()
    zip_code: str = _required()

    @field_validator("street", "city", "state", "zip_code", mode="before")
    @classmethod
    def strip_parts(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("street")
    @classmethod
    def validate_street(cls, v: str) -> str:
        if not v:
            raise ValueError("Street address is required")
        return v

    @field_validator("city")
    @classmethod
    def validate_city(cls, v: str) -> str:
        if not v:
            raise ValueError("City is required")
        return v

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str) -> str:
        if not v:
            raise ValueError("State is required")
        return v

    @field_validator("zip_code")
    @classmethod
    def validate_zip_code(cls, v: str) -> str:
        if not v:
            raise ValueError("Zip code is required")
        if not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Zip code must be 6 digits")
        return v

    def to_address(self) -> Address:
        return Address.model_validate(self.model_dump())


class RegisterRequest(CamelModel):
    """Self-registration payload. Unknown fields (e.g. commissionRate) are ignored."""

    name: str = _required()
    email: str = _required()
    password: str = _required()
    phone: str = _required()
    date_of_birth: date = Field(default=None, validate_default=True)
    address: AddressIn = Field(default=None, validate_default=True)
    role: Role = Role.CUSTOMER

    @field_validator("name", "email", "phone", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Name is required")
        if not (NAME_MIN_LEN <= len(v) <= NAME_MAX_LEN):
            raise ValueError("Name must be between 2 and 50 characters")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        if len(v) < PASSWORD_MIN_LEN:
            raise ValueError("Password must be at least 6 characters")
        if not PASSWORD_COMPLEXITY.match(v):
            raise ValueError(
                "Password must contain at least one uppercase letter, "
                "one lowercase letter, and one number"
            )
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not v:
            raise ValueError("Phone number is required")
        if not PHONE_PATTERN.match(v):
            raise ValueError("Phone number must be 10 digits")
        return v

    @field_validator("date_of_birth", mode="wrap")
    @classmethod
    def validate_date_of_birth(cls, v: Any, handler: ValidatorFunctionWrapHandler) -> date:
        if v is None or v == "":
            raise ValueError("Date of birth is required")
        try:
            born = handler(v)
        except ValidationError:
            raise ValueError("Please provide a valid date") from None
        if age_on(born, date.today()) < MIN_AGE_YEARS:
            raise ValueError("You must be at least 18 years old to register")
        return born

    @field_validator("address", mode="before")
    @classmethod
    def default_address(cls, v: Any) -> Any:
        # A missing address reports each required part.
        return {} if v is None else v

    @field_validator("role", mode="wrap")
    @classmethod
    def validate_role(cls, v: Any, handler: ValidatorFunctionWrapHandler) -> Role:
        try:
            return handler(v)
        except ValidationError:
            raise ValueError("Role must be customer, agent, or admin") from None


class LoginRequest(CamelModel):
    """Credentials for login. No complexity re-check on the password."""

    email: str = _required()
    password: str = _required()

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserSummary(CamelModel):
    """Public user summary returned on register/login (no password)."""

    id: str
    name: str
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class UserProfile(CamelModel):
    """Full profile for GET /me (no password)."""

    id: str
    name: str
    email: str
    phone: str
    date_of_birth: date
    address: Address
    role: Role
    is_active: bool
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls.model_validate(user.model_dump(include=set(cls.model_fields)))


class CurrentUser(CamelModel):
    """Authenticated user (id, name, email, role) attached to the request."""

    id: str
    name: str
    email: str
    role: Role


class AuthResponse(CamelModel):
    """Token and user summary returned after register or login."""

    success: bool = True
    message: str
    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    user: UserSummary


class MeResponse(CamelModel):
    success: bool = True
    user: UserProfile


class UsersListResponse(CamelModel):
    """Response for GET /users (admin only)."""

    success: bool = True
    count: int
    users: list[UserSummary]
