"""Condensing older turns into a single per-user summary."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Literal, Optional, Sequence

from chatmemory.errors import CompletionServiceError

from .schemas import Summary, Turn

if TYPE_CHECKING:
    from chatmemory.infrastructure.base import StorageBackend
    from chatmemory.llm.base import CompletionService

    from .store import MessageStore

logger = logging.getLogger(__name__)

# Returned instead of raising when the completion service fails; never persisted
SUMMARY_FAILED = "Summary unavailable: the conversation could not be summarized."

SUMMARY_PROMPT = """Summarize the key points and topics discussed in the following conversation as one short paragraph.
Be concise and focus on information that would be useful context for future interactions: the topics discussed, the user's preferences, and facts about the user.

Conversation:

{conversation}

Summary:"""

MERGE_PROMPT = """Here is the summary of an earlier part of a conversation, followed by the most recent messages.
Rewrite it as one short paragraph covering both. Keep the topics discussed, the user's preferences, and facts about the user that would be useful context for future interactions.

Previous summary:
{previous}

Recent conversation:

{conversation}

Summary:"""


def format_conversation(turns: Sequence[Turn]) -> str:
    """Render turns as `role: content` lines in the given order."""
    return "\n".join(f"{turn.role}: {turn.content}" for turn in turns)


class Summarizer:
    """Decides when to summarize and regenerates the stored summary.

    Stateless between runs: the decision is recomputed from the turn count
    and every run rebuilds the summary from the newest `max_messages` turns.
    Turns older than that window no longer feed the summary.
    """

    def __init__(
        self,
        backend: StorageBackend,
        store: MessageStore,
        completion: CompletionService,
        threshold: int = 40,
        max_messages: int = 50,
        strategy: Literal["regenerate", "merge"] = "regenerate",
    ) -> None:
        """Initialize summarizer.

        Args:
            backend: Durable store holding the summary row
            store: Message store used to read the summarization window
            completion: Completion service producing the summary text
            threshold: Turn count at which summarization starts
            max_messages: Size of the summarization window
            strategy: "regenerate" from the window only, or "merge" with the
                previous summary
        """
        self.backend = backend
        self.store = store
        self.completion = completion
        self.threshold = threshold
        self.max_messages = max_messages
        self.strategy = strategy

    def should_summarize(self, turn_count: int) -> bool:
        """True once the user has at least `threshold` turns."""
        return turn_count >= self.threshold

    async def summarize(self, turns: Sequence[Turn], previous_summary: Optional[str] = None) -> str:
        """Condense an oldest-first window of turns into one paragraph.

        Returns SUMMARY_FAILED instead of raising when the completion
        service fails.
        """
        conversation = format_conversation(turns)
        if previous_summary:
            prompt = MERGE_PROMPT.format(previous=previous_summary, conversation=conversation)
        else:
            prompt = SUMMARY_PROMPT.format(conversation=conversation)

        try:
            summary = await self.completion.complete(prompt)
        except CompletionServiceError as e:
            logger.error(f"Error generating memory summary: {e}")
            return SUMMARY_FAILED

        return summary.strip()

    async def persist_summary(self, user_id: str, content: str) -> Summary:
        """Create or overwrite the user's summary."""
        return await self.backend.upsert_summary(user_id, content)

    async def get_summary(self, user_id: str) -> Optional[Summary]:
        """Return the user's current summary, if any."""
        return await self.backend.get_summary(user_id)

    async def run(self, user_id: str) -> Optional[Summary]:
        """Summarize the newest window of turns and store the result.

        Returns:
            The stored summary, or None if nothing was stored

        Raises:
            StoreError: If reading turns or writing the summary fails
        """
        start_time = time.monotonic()

        newest_first = await self.store.all_turns_descending(user_id, self.max_messages)
        if not newest_first:
            logger.debug(f"No messages to summarize for user {user_id}")
            return None

        previous = None
        if self.strategy == "merge":
            existing = await self.get_summary(user_id)
            previous = existing.content if existing else None

        logger.info(f"Generating memory summary for user {user_id}...")
        content = await self.summarize(list(reversed(newest_first)), previous_summary=previous)

        if content == SUMMARY_FAILED or not content:
            logger.warning(f"Memory summary not updated for user {user_id}")
            return None

        summary = await self.persist_summary(user_id, content)

        generation_time_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"Memory summary saved for user {user_id} "
            f"({len(newest_first)} messages, {generation_time_ms}ms)"
        )
        return summary
