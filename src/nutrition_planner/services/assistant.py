"""Nutrition assistant chat backed by an external language model."""

from dataclasses import dataclass
from typing import Protocol

from nutrition_planner.domain.assistant import ChatMessage, UserPreferences
from nutrition_planner.domain.errors import ValidationError

_ROLES = {"user": "user", "ai": "assistant"}


class AssistantClient(Protocol):
    """Interface for the language model behind the assistant."""

    async def reply(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[dict[str, str]],
    ) -> str:
        """Return the model's next message for the conversation."""


@dataclass
class AssistantService:
    """Builds the nutritionist prompt and relays the conversation."""

    client: AssistantClient
    model: str

    async def chat(
        self, messages: list[ChatMessage], preferences: UserPreferences
    ) -> str:
        """Answer the last user message in the light of the user's profile."""
        if not messages:
            raise ValidationError("At least one message is required")
        return await self.client.reply(
            model=self.model,
            instructions=build_instructions(preferences),
            messages=[
                {"role": _ROLES[message.type], "content": message.content}
                for message in messages
            ],
        )


def build_instructions(preferences: UserPreferences) -> str:
    """Describe the user's profile for the model."""
    meals = preferences.meal_preferences
    planned = [
        meal
        for meal, wanted in (
            ("breakfast", meals.breakfast),
            ("lunch", meals.lunch),
            ("dinner", meals.dinner),
            ("snacks", meals.snacks),
        )
        if wanted
    ]
    lines = [
        "You are an AI nutritionist assistant. Consider these user preferences:",
        f"- Name: {_value(preferences.name)}",
        f"- Age: {_value(preferences.age)}",
        f"- Weight: {_value(preferences.weight, 'kg')}",
        f"- Height: {_value(preferences.height, 'cm')}",
        f"- Diet Restrictions: {_listed(preferences.dietary_restrictions)}",
        f"- Allergies: {_listed(preferences.allergies)}",
        f"- Weekly Budget: {_budget(preferences.weekly_budget)}",
        f"- Fitness Goals: {_listed(preferences.fitness_goals)}",
        f"- Meals to plan: {_listed(planned)}",
    ]
    return "\n".join(lines)


def _value(value: object, unit: str = "") -> str:
    if value is None:
        return "not provided"
    return f"{value}{unit}"


def _listed(values: list[str]) -> str:
    return ", ".join(values) if values else "none"


def _budget(value: float | None) -> str:
    if value is None:
        return "not provided"
    return f"₹{value:.0f}"
