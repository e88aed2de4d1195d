"""Exception types shared across the chat memory service."""


class ChatMemoryError(Exception):
    """Base class for service errors."""


class StoreError(ChatMemoryError):
    """A durable-store operation failed."""


class CompletionServiceError(ChatMemoryError):
    """The completion backend failed or timed out."""


class ValidationError(ChatMemoryError):
    """Required input is missing or empty."""
