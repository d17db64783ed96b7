"""OpenAI chat completions adapter for the ChatModel capability."""

import json
import logging
import os
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from agent_runtime.config import settings
from agent_runtime.providers.base import ModelInvocationError, ModelResponse, T, UsageMetadata

logger = logging.getLogger(__name__)


class OpenAIChatModel:
    """ChatModel backed by ``AsyncOpenAI``.

    Structured calls use JSON-object mode and validate the result with the
    requested pydantic schema, so a malformed answer surfaces as a
    ModelInvocationError rather than a half-filled object.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model_name = model_name or settings.model.llm_model
        self.temperature = settings.model.llm_temperature if temperature is None else temperature
        self._client = client or AsyncOpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            timeout=timeout,
        )

    async def _complete(self, prompt: str, **kwargs: Any) -> Any:
        try:
            return await self._client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except OpenAIError as e:
            logger.error("OpenAI request failed for model %s: %s", self.model_name, e)
            raise ModelInvocationError(f"OpenAI API error: {e}") from e

    @staticmethod
    def _usage(completion: Any) -> Optional[UsageMetadata]:
        usage = getattr(completion, "usage", None)
        if usage is None:
            return None
        return UsageMetadata(
            input_tokens=usage.prompt_tokens or 0,
            output_tokens=usage.completion_tokens or 0,
            total_tokens=usage.total_tokens or 0,
        )

    async def invoke(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ModelResponse:
        kwargs: dict[str, Any] = {
            "temperature": self.temperature if temperature is None else temperature,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        completion = await self._complete(prompt, **kwargs)
        text = completion.choices[0].message.content or ""
        return ModelResponse(text=text.strip(), usage_metadata=self._usage(completion))

    async def invoke_structured(self, prompt: str, schema: type[T]) -> T:
        instructions = (
            f"{prompt}\n\nRespond with a single JSON object matching this JSON schema:\n"
            f"{json.dumps(schema.model_json_schema(by_alias=True))}"
        )
        completion = await self._complete(
            instructions,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        content = completion.choices[0].message.content or ""
        try:
            return schema.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Structured output did not match %s: %s", schema.__name__, e)
            raise ModelInvocationError(f"Invalid structured output for {schema.__name__}") from e
