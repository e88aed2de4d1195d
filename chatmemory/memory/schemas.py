"""Memory data model."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatmemory.llm.base import ContextEntry, Speaker

Role = Literal["user", "assistant"]


class Turn(BaseModel):
    """One stored chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    role: Role
    content: str
    timestamp: datetime

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: str) -> str:
        """Read legacy 'model' rows as assistant turns."""
        return "assistant" if v == "model" else v


class Summary(BaseModel):
    """Condensed text standing in for a window of older turns (one per user)."""

    id: str
    user_id: str
    content: str
    updated_at: datetime


class SalientFact(BaseModel):
    """Short durable statement about the user."""

    id: str
    user_id: str
    content: str
    timestamp: datetime


class Persona(BaseModel):
    """Per-user system instruction, set explicitly by the user."""

    id: str
    user_id: str
    description: str
    created_at: datetime
    updated_at: datetime


class MaintenanceFailure(BaseModel):
    """A background memory task failure, kept for observability."""

    task_name: str
    branch: str = Field(..., description="'count', 'extraction', 'summarization' or 'task'")
    error: str
    occurred_at: datetime


__all__ = [
    "ContextEntry",
    "MaintenanceFailure",
    "Persona",
    "Role",
    "SalientFact",
    "Speaker",
    "Summary",
    "Turn",
]
