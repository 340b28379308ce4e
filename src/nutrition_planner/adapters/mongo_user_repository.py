"""MongoDB-backed user repository."""

import logging
from dataclasses import dataclass

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from nutrition_planner.domain.errors import (
    DuplicateEmail,
    DuplicateUsername,
    StoreUnavailable,
)
from nutrition_planner.domain.users import NewUser, UserProfile, UserRecord
from nutrition_planner.services.auth import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class MongoUserRepository(UserRepository):
    """MongoDB implementation for user persistence."""

    collection: Collection

    @classmethod
    def create(
        cls, uri: str, db_name: str, timeout_ms: int = 5000
    ) -> "MongoUserRepository":
        """Create a repository with its own client."""
        client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        return cls(collection=client[db_name]["users"])

    def ensure_indexes(self) -> None:
        """Create unique indexes on email and (when present) name."""
        try:
            self.collection.create_index(
                [("email", ASCENDING)], unique=True, name="email_unique"
            )
            self.collection.create_index(
                [("name", ASCENDING)],
                unique=True,
                name="name_unique",
                partialFilterExpression={"name": {"$type": "string"}},
            )
        except PyMongoError as exc:
            logger.error("Could not create user indexes: %s", exc)
            raise StoreUnavailable() from exc

    def get_by_id(self, user_id: str) -> UserRecord | None:
        """Return the user for an ObjectId string, if present."""
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        return self._find_one({"_id": object_id})

    def find_by_email(self, email: str) -> UserRecord | None:
        return self._find_one({"email": email})

    def find_by_name(self, name: str) -> UserRecord | None:
        return self._find_one({"name": name})

    def create_user(self, user: NewUser) -> UserRecord:
        """Insert a user document, mapping unique-index violations."""
        document: dict[str, object] = {
            "email": user.email,
            "password": user.password_hash,
            "profile": UserProfile().model_dump(),
        }
        if user.name is not None:
            document["name"] = user.name
        try:
            result = self.collection.insert_one(document)
        except DuplicateKeyError as exc:
            raise _duplicate_error(exc) from exc
        except PyMongoError as exc:
            logger.error("MongoDB insert failed: %s", exc)
            raise StoreUnavailable() from exc
        return UserRecord(
            id=str(result.inserted_id),
            email=user.email,
            password_hash=user.password_hash,
            name=user.name,
        )

    def close(self) -> None:
        """Close the underlying client."""
        self.collection.database.client.close()

    def _find_one(self, query: dict[str, object]) -> UserRecord | None:
        try:
            document = self.collection.find_one(query)
        except PyMongoError as exc:
            logger.error("MongoDB lookup failed: %s", exc)
            raise StoreUnavailable() from exc
        if document is None:
            return None
        return _to_record(document)


def _to_record(document: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=str(document["_id"]),
        email=str(document["email"]),
        password_hash=str(document["password"]),
        name=document.get("name"),
        profile=UserProfile.model_validate(document.get("profile") or {}),
    )


def _duplicate_error(exc: DuplicateKeyError) -> DuplicateEmail | DuplicateUsername:
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    if "name" in key_pattern:
        return DuplicateUsername()
    if "email" in key_pattern:
        return DuplicateEmail()
    if "name_unique" in str(exc):
        return DuplicateUsername()
    return DuplicateEmail()
