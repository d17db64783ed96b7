from agent_runtime.providers.base import ChatModel, ModelInvocationError, ModelResponse, UsageMetadata

__all__ = ["ChatModel", "ModelInvocationError", "ModelResponse", "UsageMetadata"]
