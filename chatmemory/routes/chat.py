"""Chat message API route."""

import logging

from fastapi import APIRouter, HTTPException

from ..dependencies import ChatServiceDep
from ..errors import ChatMemoryError, ValidationError
from ..schemas import SendMessageRequest, SendMessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat/message", response_model=SendMessageResponse)
async def send_message(body: SendMessageRequest, chat: ChatServiceDep) -> SendMessageResponse:
    """Answer a user message with memory context.

    The user message is saved before the completion call; if the completion
    fails it stays saved without a reply.

    Raises:
        HTTPException: 400 if message or user id is missing,
            500 if the store or completion service fails
    """
    try:
        reply = await chat.handle_user_turn(body.user_id, body.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ChatMemoryError as e:
        logger.error(f"Error in send_message: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate response")

    return SendMessageResponse(response=reply)
