"""Request payloads accepted by the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nutrition_planner.domain.assistant import ChatMessage, UserPreferences


class RegisterRequest(BaseModel):
    """Registration form. Emptiness is checked by the auth service."""

    email: str | None = None
    password: str | None = None
    name: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ChatRequest(BaseModel):
    """Conversation so far plus the user's profile snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    messages: list[ChatMessage] = Field(default_factory=list)
    user_preferences: UserPreferences = Field(default_factory=UserPreferences)
