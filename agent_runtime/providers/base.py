"""The model capability the turn processor depends on."""

from typing import Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class ModelInvocationError(Exception):
    """A model call failed (transport, provider or schema validation error)."""


class UsageMetadata(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ModelResponse(BaseModel):
    text: str
    usage_metadata: Optional[UsageMetadata] = None


@runtime_checkable
class ChatModel(Protocol):
    """
    Opaque text generation capability.

    ``invoke`` returns plain text plus token usage when the provider reports
    it. ``invoke_structured`` returns an instance of ``schema`` validated from
    the model's JSON output. Implementations raise ModelInvocationError.
    """

    model_name: str

    async def invoke(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ModelResponse:
        ...

    async def invoke_structured(self, prompt: str, schema: type[T]) -> T:
        ...
