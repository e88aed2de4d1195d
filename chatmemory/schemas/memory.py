"""Pydantic schemas for conversation memory endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageSchema(BaseModel):
    """Schema for a single stored turn."""

    id: str = Field(..., description="Turn ID")
    role: str = Field(..., description="Message role: 'user' or 'assistant'")
    content: str = Field(..., description="Message content")
    timestamp: datetime = Field(..., description="When the turn was stored")


class MessagesResponse(BaseModel):
    """Schema for a user's full turn log."""

    messages: List[MessageSchema] = Field(default_factory=list, description="Turns, oldest first")


class SummaryResponse(BaseModel):
    """Schema for a user's conversation summary."""

    summary: Optional[str] = Field(None, description="Summary text, null if none yet")
    updated_at: Optional[datetime] = Field(None, description="Last regeneration time")


class FactsResponse(BaseModel):
    """Schema for a user's salient facts."""

    facts: List[str] = Field(default_factory=list, description="Facts, oldest first")
