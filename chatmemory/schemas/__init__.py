"""Pydantic schemas for API requests and responses."""

from .chat import SendMessageRequest, SendMessageResponse
from .memory import FactsResponse, MessageSchema, MessagesResponse, SummaryResponse
from .personality import PersonalityResponse, PersonalityUpdate

__all__ = [
    # Chat schemas
    "SendMessageRequest",
    "SendMessageResponse",
    # Memory schemas
    "MessageSchema",
    "MessagesResponse",
    "SummaryResponse",
    "FactsResponse",
    # Personality schemas
    "PersonalityUpdate",
    "PersonalityResponse",
]
