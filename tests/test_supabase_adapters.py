"""Tests for the Supabase user repository."""

from dataclasses import dataclass, field
from uuid import uuid4

import httpx
import pytest
from postgrest.exceptions import APIError

from nutrition_planner.adapters.supabase_user_repository import SupabaseUserRepository
from nutrition_planner.domain.errors import (
    DuplicateEmail,
    DuplicateUsername,
    StoreUnavailable,
)
from nutrition_planner.domain.users import NewUser


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    error: Exception | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "email": "cook@example.com",
        "name": "chef",
        "password_hash": "$2b$04$hash",
        "profile": {"allergies": ["peanuts"], "weekly_budget": 1200},
    }
    row.update(overrides)
    return row


def _unique_violation(constraint: str, column: str) -> APIError:
    return APIError(
        {
            "message": f'duplicate key value violates unique constraint "{constraint}"',
            "code": "23505",
            "details": f"Key ({column})=(value) already exists.",
            "hint": None,
        }
    )


def test_supabase_user_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    users_table = client.table("users")
    row = _row()
    users_table.queue("insert", [row])
    users_table.queue("select", [row])

    repository = SupabaseUserRepository(client)
    created = repository.create_user(
        NewUser(email="cook@example.com", password_hash="$2b$04$hash", name="chef")
    )
    fetched = repository.find_by_email("cook@example.com")

    assert created.id == row["id"]
    assert fetched is not None
    assert fetched.profile.allergies == ["peanuts"]
    assert users_table.last_payload["email"] == "cook@example.com"
    assert ("email", "cook@example.com") in users_table.last_filters


def test_supabase_lookup_miss_returns_none() -> None:
    repository = SupabaseUserRepository(FakeSupabaseClient())

    assert repository.find_by_name("ghost") is None


def test_supabase_maps_unique_violations() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseUserRepository(client)
    new_user = NewUser(email="cook@example.com", password_hash="h", name="chef")

    client.table("users").error = _unique_violation("users_email_key", "email")
    with pytest.raises(DuplicateEmail):
        repository.create_user(new_user)

    client.table("users").error = _unique_violation("users_name_key", "name")
    with pytest.raises(DuplicateUsername):
        repository.create_user(new_user)


def test_supabase_invalid_uuid_is_not_found() -> None:
    client = FakeSupabaseClient()
    client.table("users").error = APIError(
        {"message": "invalid input syntax for type uuid", "code": "22P02"}
    )

    assert SupabaseUserRepository(client).get_by_id("not-a-uuid") is None


def test_supabase_outage_raises_store_unavailable() -> None:
    client = FakeSupabaseClient()
    client.table("users").error = httpx.ConnectError("connection refused")
    repository = SupabaseUserRepository(client)

    with pytest.raises(StoreUnavailable):
        repository.find_by_email("cook@example.com")
    with pytest.raises(StoreUnavailable):
        repository.create_user(NewUser(email="a@b.c", password_hash="h"))
