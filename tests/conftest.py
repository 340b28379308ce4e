"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from nutrition_planner.config import Settings
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.errors import (
    DuplicateEmail,
    DuplicateUsername,
    StoreUnavailable,
)
from nutrition_planner.domain.users import NewUser, UserRecord
from nutrition_planner.services.assistant import AssistantClient, AssistantService
from nutrition_planner.services.auth import AuthService, UserRepository
from nutrition_planner.services.passwords import PasswordHasher
from nutrition_planner.services.tokens import TokenSigner

TEST_SECRET = "test-secret-0123456789"


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository with store-level uniqueness."""

    users: dict[str, UserRecord] = field(default_factory=dict)
    indexes_ready: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def ensure_indexes(self) -> None:
        self.indexes_ready = True

    def get_by_id(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def find_by_email(self, email: str) -> UserRecord | None:
        for user in list(self.users.values()):
            if user.email == email:
                return user
        return None

    def find_by_name(self, name: str) -> UserRecord | None:
        for user in list(self.users.values()):
            if user.name == name:
                return user
        return None

    def create_user(self, user: NewUser) -> UserRecord:
        with self._lock:
            for existing in self.users.values():
                if existing.email == user.email:
                    raise DuplicateEmail()
                if user.name is not None and existing.name == user.name:
                    raise DuplicateUsername()
            record = UserRecord(
                id=uuid4().hex,
                email=user.email,
                password_hash=user.password_hash,
                name=user.name,
            )
            self.users[record.id] = record
            return record


@dataclass
class RacingUserRepository(InMemoryUserRepository):
    """Lets every registrant pass the email pre-check before anyone inserts."""

    barrier: threading.Barrier = field(default_factory=lambda: threading.Barrier(2))

    def find_by_email(self, email: str) -> UserRecord | None:
        found = super().find_by_email(email)
        self.barrier.wait(timeout=5)
        return found


@dataclass
class UnavailableUserRepository(UserRepository):
    """Repository whose store is down."""

    def ensure_indexes(self) -> None:
        raise StoreUnavailable()

    def get_by_id(self, user_id: str) -> UserRecord | None:
        raise StoreUnavailable()

    def find_by_email(self, email: str) -> UserRecord | None:
        raise StoreUnavailable()

    def find_by_name(self, name: str) -> UserRecord | None:
        raise StoreUnavailable()

    def create_user(self, user: NewUser) -> UserRecord:
        raise StoreUnavailable()


@dataclass
class FakeAssistantClient(AssistantClient):
    """Fake assistant client returning a fixed reply."""

    answer: str = "Try oats with banana for breakfast."
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def reply(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[dict[str, str]],
    ) -> str:
        self.calls.append(
            {"model": model, "instructions": instructions, "messages": messages}
        )
        if self.error is not None:
            raise self.error
        return self.answer


@dataclass
class FixedClock:
    """Controllable clock for token tests."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def make_auth_service(
    repository: UserRepository | None = None, clock: FixedClock | None = None
) -> AuthService:
    tokens = (
        TokenSigner(secret=TEST_SECRET, clock=clock)
        if clock is not None
        else TokenSigner(secret=TEST_SECRET)
    )
    return AuthService(
        repository=repository or InMemoryUserRepository(),
        tokens=tokens,
        hasher=PasswordHasher(rounds=4),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        mongo_uri="mongodb://localhost:27017",
        bcrypt_rounds=4,
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def auth_service(user_repository: InMemoryUserRepository) -> AuthService:
    return make_auth_service(user_repository)


@pytest.fixture
def assistant_client() -> FakeAssistantClient:
    return FakeAssistantClient()


@pytest.fixture
def container(
    settings: Settings,
    auth_service: AuthService,
    assistant_client: FakeAssistantClient,
) -> AppContainer:
    assistant_service = AssistantService(
        client=assistant_client, model=settings.openai_model
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_service=auth_service,
        assistant_service=assistant_service,
        close_resources=close_resources,
    )
