"""Chat service: the save → context → complete → save sequence for one turn."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Optional

from chatmemory.errors import CompletionServiceError, ValidationError

if TYPE_CHECKING:
    from chatmemory.llm.base import CompletionService

    from .context import ContextAssembler
    from .store import MessageStore

logger = logging.getLogger(__name__)

# Inline base64 images in markdown, e.g. [img](data:image/png;base64,...)
_INLINE_IMAGE = re.compile(r"\[.*?\]\(data:image/.*?\)")


def filter_unexpected_content(response: str) -> str:
    """Remove inline base64 image links from a model reply."""
    return _INLINE_IMAGE.sub("", response).strip()


class ChatService:
    """Handles one user turn end to end.

    Failure policy:
    - ValidationError before any side effect
    - StoreError on the user-turn save aborts before the completion call
    - completion errors surface to the caller; the saved user turn stays
    - memory maintenance runs detached and never affects the reply
    """

    def __init__(
        self,
        store: MessageStore,
        assembler: ContextAssembler,
        completion: CompletionService,
        reply_timeout_seconds: Optional[float] = None,
    ) -> None:
        self.store = store
        self.assembler = assembler
        self.completion = completion
        self.reply_timeout_seconds = reply_timeout_seconds

    async def _complete(self, context) -> str:
        if self.reply_timeout_seconds is None:
            return await self.completion.complete(context)
        try:
            return await asyncio.wait_for(
                self.completion.complete(context), timeout=self.reply_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise CompletionServiceError(
                f"Completion timed out after {self.reply_timeout_seconds}s"
            ) from e

    async def handle_user_turn(self, user_id: Optional[str], message: Optional[str]) -> str:
        """Save the user message, answer it with memory context, save the reply.

        Returns:
            The assistant reply text

        Raises:
            ValidationError: If the message or user id is missing
            StoreError: If a store operation on the reply path fails
            CompletionServiceError: If the completion service fails
        """
        message = (message or "").strip()
        user_id = (user_id or "").strip()
        if not message:
            raise ValidationError("Message is required")
        if not user_id:
            raise ValidationError("User ID is required")

        saved = await self.store.append_turn(user_id, message, "user")

        # The new message is appended last by the assembler, so keep it out of history
        window = self.store.recent_window
        recent = await self.store.recent_turns(user_id, window + 1)
        history = [turn for turn in recent if turn.id != saved.id][-window:] if window > 0 else []

        context = await self.assembler.build_context(user_id, history, message)

        reply = filter_unexpected_content(await self._complete(context))

        await self.store.append_turn(user_id, reply, "assistant")
        return reply
