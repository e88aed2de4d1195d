"""Pydantic schemas for chat message endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    """Schema for sending a chat message.

    Fields are optional so that missing values reach the service and come
    back as 400 responses with a readable message.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId", description="User identifier")
    message: Optional[str] = Field(None, description="User message content")


class SendMessageResponse(BaseModel):
    """Schema for the assistant reply."""

    response: str = Field(..., description="Assistant reply text")
