"""FastAPI route modules."""

from . import chat, memory, personality

__all__ = ["chat", "memory", "personality"]
