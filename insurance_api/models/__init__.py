"""Document models."""

from insurance_api.models.base import CamelModel
from insurance_api.models.user import Address, Role, User, new_user_document

__all__ = ["Address", "CamelModel", "Role", "User", "new_user_document"]
