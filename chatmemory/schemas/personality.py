"""Pydantic schemas for personality endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..memory.schemas import Persona


class PersonalityUpdate(BaseModel):
    """Schema for saving a personality."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId", description="User identifier")
    description: Optional[str] = Field(None, description="Custom character description")


class PersonalityResponse(BaseModel):
    """Schema for a stored personality (null when the user has none)."""

    personality: Optional[Persona] = Field(None, description="Stored personality")
