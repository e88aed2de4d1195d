"""Read-only routes over a user's stored conversation memory."""

import logging

from fastapi import APIRouter, HTTPException

from ..dependencies import MemoryDep, UserIdDep
from ..errors import StoreError
from ..schemas import FactsResponse, MessageSchema, MessagesResponse, SummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/messages", response_model=MessagesResponse)
async def list_messages(user_id: UserIdDep, memory: MemoryDep) -> MessagesResponse:
    """Full turn log for a user, oldest first."""
    try:
        turns = await memory.store.all_turns(user_id)
    except StoreError as e:
        logger.error(f"Failed to fetch messages: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch messages")

    return MessagesResponse(
        messages=[
            MessageSchema(id=t.id, role=t.role, content=t.content, timestamp=t.timestamp)
            for t in turns
        ]
    )


@router.get("/memory/summary", response_model=SummaryResponse)
async def get_summary(user_id: UserIdDep, memory: MemoryDep) -> SummaryResponse:
    """Current conversation summary for a user."""
    try:
        summary = await memory.summarizer.get_summary(user_id)
    except StoreError as e:
        logger.error(f"Failed to fetch memory summary: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch memory summary")

    if summary is None:
        return SummaryResponse()
    return SummaryResponse(summary=summary.content, updated_at=summary.updated_at)


@router.get("/memory/facts", response_model=FactsResponse)
async def list_facts(user_id: UserIdDep, memory: MemoryDep) -> FactsResponse:
    """Salient facts stored for a user, oldest first."""
    try:
        facts = await memory.extractor.list_facts(user_id)
    except StoreError as e:
        logger.error(f"Failed to fetch salient memories: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch salient memories")

    return FactsResponse(facts=[fact.content for fact in facts])
