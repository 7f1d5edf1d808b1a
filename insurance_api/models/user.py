"""Document model for application users (auth and RBAC)."""

from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Any

from pydantic import Field

from insurance_api.models.base import CamelModel


class Role(str, Enum):
    CUSTOMER = "customer"
    AGENT = "agent"
    ADMIN = "admin"


class Address(CamelModel):
    street: str
    city: str
    state: str
    zip_code: str


class User(CamelModel):
    """
    User account stored in the `users` collection.

    password_hash is only populated when a lookup explicitly asks for it;
    default projections leave it out. commission_rate and assigned_customers
    only mean something for agents.
    """

    id: str
    name: str
    email: str
    password_hash: str | None = Field(default=None, exclude=True, repr=False)
    phone: str
    date_of_birth: date
    address: Address
    role: Role = Role.CUSTOMER
    commission_rate: float = Field(default=0, ge=0, le=100)
    assigned_customers: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        """Build a User from a raw MongoDB document."""
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        dob = data.get("date_of_birth")
        if isinstance(dob, datetime):
            data["date_of_birth"] = dob.date()
        data["assigned_customers"] = [str(c) for c in data.get("assigned_customers", [])]
        return cls.model_validate(data)


def new_user_document(
    *,
    name: str,
    email: str,
    password_hash: str,
    phone: str,
    date_of_birth: date,
    address: Address,
    role: Role = Role.CUSTOMER,
) -> dict[str, Any]:
    """Document for a new user; the store adds _id and timestamps on insert."""
    return {
        "name": name,
        "email": email.lower(),
        "password_hash": password_hash,
        "phone": phone,
        # BSON has no plain date type.
        "date_of_birth": datetime.combine(date_of_birth, time.min, tzinfo=UTC),
        "address": address.model_dump(by_alias=False),
        "role": role.value,
        "commission_rate": 0,
        "assigned_customers": [],
        "is_active": True,
    }
