"""Linearizes persona, facts, summary and history into one ordered context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from chatmemory.errors import StoreError

from .schemas import ContextEntry, Turn

if TYPE_CHECKING:
    from chatmemory.infrastructure.base import StorageBackend

    from .persona import PersonaProvider

logger = logging.getLogger(__name__)

PERSONA_ACK = "Understood. I will act according to this personality."
SUMMARY_ACK = "Okay, I have reviewed the summary of our previous conversation."


class ContextAssembler:
    """Builds the context handed to the completion service.

    The order is fixed:
    1. persona (with any salient facts appended) + assistant acknowledgement
    2. summary + assistant acknowledgement, when a non-empty summary exists
    3. recent turns, oldest first
    4. the new user message, always last

    The completion service has no system role here, so the persona travels
    as the leading user entry.
    """

    def __init__(self, backend: StorageBackend, personas: PersonaProvider) -> None:
        self.backend = backend
        self.personas = personas

    @staticmethod
    def persona_entry_text(persona: str, facts: Sequence[str]) -> str:
        """Persona instruction with facts as a bulleted list."""
        text = f"System Prompt: {persona}"
        if facts:
            bullets = "\n".join(f"- {fact}" for fact in facts)
            text += f"\n\nKnown facts about the user:\n{bullets}"
        return text

    async def _load_facts(self, user_id: str) -> List[str]:
        try:
            return [fact.content for fact in await self.backend.list_facts(user_id)]
        except StoreError as e:
            logger.warning(f"Salient memories unavailable for user {user_id}: {e}")
            return []

    async def _load_summary(self, user_id: str) -> Optional[str]:
        try:
            summary = await self.backend.get_summary(user_id)
        except StoreError as e:
            logger.warning(f"Memory summary unavailable for user {user_id}: {e}")
            return None
        return summary.content if summary else None

    def assemble(
        self,
        persona: str,
        facts: Sequence[str],
        summary: Optional[str],
        recent_turns: Sequence[Turn],
        new_message: str,
    ) -> List[ContextEntry]:
        """Pure assembly step over already-loaded memory."""
        context = [
            ContextEntry(speaker="user", text=self.persona_entry_text(persona, facts)),
            ContextEntry(speaker="assistant", text=PERSONA_ACK),
        ]

        if summary and summary.strip():
            context.append(
                ContextEntry(speaker="user", text=f"Previous Conversation Summary: {summary}")
            )
            context.append(ContextEntry(speaker="assistant", text=SUMMARY_ACK))

        for turn in sorted(recent_turns, key=lambda t: t.timestamp):
            speaker = "user" if turn.role == "user" else "assistant"
            context.append(ContextEntry(speaker=speaker, text=turn.content))

        context.append(ContextEntry(speaker="user", text=new_message))
        return context

    async def build_context(
        self, user_id: str, recent_turns: Sequence[Turn], new_message: str
    ) -> List[ContextEntry]:
        """Load persona, facts and summary for the user, then assemble.

        Missing or unreadable summary and facts are left out.
        """
        persona = await self.personas.persona_for(user_id)
        facts = await self._load_facts(user_id)
        summary = await self._load_summary(user_id)
        return self.assemble(persona, facts, summary, recent_turns, new_message)
