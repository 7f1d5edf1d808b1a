"""Persistence for application documents."""

from insurance_api.repositories.users import DuplicateEmailError, UserRepository

__all__ = ["DuplicateEmailError", "UserRepository"]
