"""Personality API routes."""

import logging

from fastapi import APIRouter, HTTPException

from ..dependencies import PersonaProviderDep, UserIdDep
from ..errors import StoreError
from ..schemas import PersonalityResponse, PersonalityUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/personality", response_model=PersonalityResponse)
async def get_personality(user_id: UserIdDep, personas: PersonaProviderDep) -> PersonalityResponse:
    """Get the stored personality for a user (null when none is set)."""
    try:
        persona = await personas.get_persona(user_id)
    except StoreError as e:
        logger.error(f"Failed to get personality: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve personality")

    return PersonalityResponse(personality=persona)


@router.post("/personality", response_model=PersonalityResponse)
async def save_personality(
    body: PersonalityUpdate, personas: PersonaProviderDep
) -> PersonalityResponse:
    """Save or update the personality for a user.

    Raises:
        HTTPException: 400 if user id or description is missing
    """
    if not body.user_id or body.description is None:
        raise HTTPException(status_code=400, detail="User ID and description are required")

    try:
        persona = await personas.save_persona(body.user_id, body.description)
    except StoreError as e:
        logger.error(f"Failed to save personality: {e}")
        raise HTTPException(status_code=500, detail="Failed to save personality")

    return PersonalityResponse(personality=persona)
