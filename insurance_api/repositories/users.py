"""Credential store: the `users` collection."""

import logging
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from insurance_api.models.user import User

logger = logging.getLogger(__name__)

# Default projection: never return the password digest unless asked.
WITHOUT_PASSWORD = {"password_hash": 0}


class DuplicateEmailError(Exception):
    """The unique email index rejected an insert."""


def _object_id(user_id: str) -> ObjectId | None:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


class UserRepository:
    """Lookup, insert and update of User documents."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection
        self.indexes_ready = False

    def ensure_indexes(self) -> None:
        """Create the unique email index (idempotent)."""
        self.collection.create_index([("email", ASCENDING)], unique=True, name="email_unique")
        self.indexes_ready = True

    def find_by_email(self, email: str, include_password: bool = False) -> User | None:
        projection = None if include_password else WITHOUT_PASSWORD
        doc = self.collection.find_one({"email": email.strip().lower()}, projection)
        return User.from_document(doc) if doc else None

    def find_by_id(self, user_id: str) -> User | None:
        oid = _object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid}, WITHOUT_PASSWORD)
        return User.from_document(doc) if doc else None

    def list_all(self) -> list[User]:
        cursor = self.collection.find({}, WITHOUT_PASSWORD).sort("created_at", ASCENDING)
        return [User.from_document(doc) for doc in cursor]

    def insert(self, document: dict[str, Any]) -> User:
        """
        Insert a new user document. Raises DuplicateEmailError on an existing email.

        The unique email index is created first if it is not known to exist;
        if that fails the PyMongoError propagates and nothing is inserted.
        """
        if not self.indexes_ready:
            self.ensure_indexes()
        now = datetime.now(UTC)
        doc = {**document, "created_at": now, "updated_at": now}
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise DuplicateEmailError(document.get("email")) from exc
        doc["_id"] = result.inserted_id
        doc.pop("password_hash", None)
        logger.info("Inserted user id=%s role=%s", result.inserted_id, doc.get("role"))
        return User.from_document(doc)

    def update(self, user_id: str, changes: dict[str, Any]) -> User | None:
        """
        Apply field changes and bump updated_at. Never touches the password
        digest; use set_password_hash for that.
        """
        oid = _object_id(user_id)
        if oid is None:
            return None
        fields = {k: v for k, v in changes.items() if k not in ("_id", "password_hash")}
        fields["updated_at"] = datetime.now(UTC)
        result = self.collection.update_one({"_id": oid}, {"$set": fields})
        if result.matched_count == 0:
            return None
        return self.find_by_id(user_id)

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        oid = _object_id(user_id)
        if oid is None:
            return False
        result = self.collection.update_one(
            {"_id": oid},
            {"$set": {"password_hash": password_hash, "updated_at": datetime.now(UTC)}},
        )
        return result.matched_count == 1
