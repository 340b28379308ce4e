"""Models for the nutrition assistant chat."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from nutrition_planner.domain.users import UserProfile


class ChatMessage(BaseModel):
    """Single chat message as the front-end sends it."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["user", "ai"]
    content: str


class UserPreferences(UserProfile):
    """Profile snapshot the front-end attaches to chat requests."""

    name: str | None = None
