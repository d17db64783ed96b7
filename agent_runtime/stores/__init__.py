from agent_runtime.stores.channel_state import InMemoryChannelStateStore

__all__ = ["InMemoryChannelStateStore"]
