"""OpenAI Responses API client for meal identification and estimation."""

from dataclasses import dataclass
from typing import Protocol

from openai import AsyncOpenAI


class MealModelClient(Protocol):
    """Interface for LLM calls that return text, optionally schema-constrained."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        text: str,
        image_url: str | None = None,
        schema: dict[str, object] | None = None,
        schema_name: str = "meal_output",
    ) -> str:
        """Return the model's text output for the given prompt."""


@dataclass
class OpenAIMealClient(MealModelClient):
    """Model client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIMealClient":
        """Create an OpenAI meal client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        text: str,
        image_url: str | None = None,
        schema: dict[str, object] | None = None,
        schema_name: str = "meal_output",
    ) -> str:
        """Call OpenAI Responses API with text and an optional image URL.

        When a JSON schema is given the output is constrained to it.
        """
        content: list[dict[str, object]] = [{"type": "input_text", "text": text}]
        if image_url:
            content.append({"type": "input_image", "image_url": image_url})
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": [{"role": "user", "content": content}],
            "temperature": 0,
            "store": store,
        }
        if schema is not None:
            request_payload["text"] = {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}
            # Reasoning models reject a temperature override.
            request_payload.pop("temperature")

        response = await self.client.responses.create(**request_payload)
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
