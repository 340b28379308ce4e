"""Supabase-backed user repository.

Expects a ``users`` table with ``unique`` constraints on ``email`` and
``name`` (``name`` nullable), a ``password_hash`` column and a ``profile``
jsonb column.
"""

import logging
from dataclasses import dataclass

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_planner.domain.errors import (
    DuplicateEmail,
    DuplicateUsername,
    StoreUnavailable,
)
from nutrition_planner.domain.users import NewUser, UserProfile, UserRecord
from nutrition_planner.services.auth import UserRepository

logger = logging.getLogger(__name__)

_COLUMNS = "id, email, name, password_hash, profile"
_UNIQUE_VIOLATION = "23505"
# Raised for ids that are not valid uuids.
_INVALID_TEXT_REPRESENTATION = "22P02"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def ensure_indexes(self) -> None:
        """Unique constraints are part of the table migration."""

    def get_by_id(self, user_id: str) -> UserRecord | None:
        return self._find_one("id", user_id)

    def find_by_email(self, email: str) -> UserRecord | None:
        return self._find_one("email", email)

    def find_by_name(self, name: str) -> UserRecord | None:
        return self._find_one("name", name)

    def create_user(self, user: NewUser) -> UserRecord:
        """Create a new user row and return it."""
        try:
            response = (
                self.client.table("users")
                .insert(
                    {
                        "email": user.email,
                        "name": user.name,
                        "password_hash": user.password_hash,
                        "profile": UserProfile().model_dump(),
                    }
                )
                .execute()
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise _duplicate_error(exc) from exc
            logger.error("Supabase insert failed: %s", exc.message)
            raise StoreUnavailable() from exc
        except httpx.HTTPError as exc:
            logger.error("Supabase unreachable: %s", exc)
            raise StoreUnavailable() from exc
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _to_record(response.data[0])

    def _find_one(self, column: str, value: str) -> UserRecord | None:
        try:
            response = (
                self.client.table("users")
                .select(_COLUMNS)
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except APIError as exc:
            if exc.code == _INVALID_TEXT_REPRESENTATION:
                return None
            logger.error("Supabase lookup failed: %s", exc.message)
            raise StoreUnavailable() from exc
        except httpx.HTTPError as exc:
            logger.error("Supabase unreachable: %s", exc)
            raise StoreUnavailable() from exc
        if response.data:
            return _to_record(response.data[0])
        return None


def _to_record(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=str(row["id"]),
        email=str(row["email"]),
        password_hash=str(row["password_hash"]),
        name=row.get("name"),
        profile=UserProfile.model_validate(row.get("profile") or {}),
    )


def _duplicate_error(exc: APIError) -> DuplicateEmail | DuplicateUsername:
    detail = f"{exc.message} {exc.details}"
    if "(name)" in detail or "users_name_key" in detail:
        return DuplicateUsername()
    return DuplicateEmail()
