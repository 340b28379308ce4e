"""User domain models."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MealPreferences(BaseModel):
    """Which meals of the day the user wants planned."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    breakfast: bool = True
    lunch: bool = True
    dinner: bool = True
    snacks: bool = False


class UserProfile(BaseModel):
    """Optional profile attributes stored alongside the account.

    Clients send camelCase keys (``weeklyBudget``); storage uses the
    snake_case field names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    age: int | None = Field(default=None, ge=0)
    weight: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    dietary_restrictions: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    weekly_budget: float | None = Field(default=None, ge=0)
    fitness_goals: list[str] = Field(default_factory=list)
    meal_preferences: MealPreferences = Field(default_factory=MealPreferences)


@dataclass(frozen=True)
class NewUser:
    """Validated registration data ready to be persisted."""

    email: str
    password_hash: str
    name: str | None = None


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: str
    email: str
    password_hash: str
    name: str | None = None
    profile: UserProfile = field(default_factory=UserProfile)


@dataclass(frozen=True)
class UserView:
    """Sanitized user data that is safe to return to clients."""

    id: str
    email: str
    name: str | None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserView":
        return cls(id=record.id, email=record.email, name=record.name)

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "email": self.email, "name": self.name}


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful register or login call."""

    user: UserView
    token: str

    def to_dict(self) -> dict[str, object]:
        return {"user": self.user.to_dict(), "token": self.token}


@dataclass(frozen=True)
class UsernameAvailability:
    """Answer to a username availability check."""

    available: bool
    message: str
    valid: bool = True

    def to_dict(self) -> dict[str, object]:
        return {"available": self.available, "message": self.message}


def normalize_email(email: str) -> str:
    """Return the canonical form used for storage and lookups."""
    return email.strip().lower()


def normalize_name(name: str | None) -> str | None:
    """Trim a display name, treating blank input as absent."""
    if name is None:
        return None
    trimmed = name.strip()
    return trimmed or None
