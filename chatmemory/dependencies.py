"""FastAPI dependency injection functions."""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Query, Request

from .memory import ChatService, MemoryComponents, PersonaProvider


async def get_memory(request: Request) -> MemoryComponents:
    """Get the MemoryComponents built in the app lifespan.

    Args:
        request: FastAPI request object

    Returns:
        MemoryComponents instance
    """
    return request.app.state.memory


async def get_chat_service(memory: Annotated[MemoryComponents, Depends(get_memory)]) -> ChatService:
    """Get the chat service."""
    return memory.chat


async def get_persona_provider(
    memory: Annotated[MemoryComponents, Depends(get_memory)],
) -> PersonaProvider:
    """Get the persona provider."""
    return memory.personas


async def get_user_id(
    user_id: Annotated[Optional[str], Query(alias="userId")] = None,
) -> str:
    """Read the user id from the `userId` query parameter.

    Raises:
        HTTPException: 400 if the parameter is missing or blank
    """
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=400, detail="User ID is required")
    return user_id.strip()


# Type aliases for dependency injection
MemoryDep = Annotated[MemoryComponents, Depends(get_memory)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
PersonaProviderDep = Annotated[PersonaProvider, Depends(get_persona_provider)]
UserIdDep = Annotated[str, Depends(get_user_id)]
