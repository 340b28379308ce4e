"""OpenAI Responses API client for the nutrition assistant."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_planner.services.assistant import AssistantClient


@dataclass
class OpenAIAssistantClient(AssistantClient):
    """Assistant client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAssistantClient":
        """Create an OpenAI assistant client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def reply(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[dict[str, str]],
    ) -> str:
        """Send the conversation and return the generated text."""
        response = await self.client.responses.create(
            model=model,
            instructions=instructions,
            input=messages,
            max_output_tokens=2048,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
