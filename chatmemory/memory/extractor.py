"""Salient fact extraction from recent turns using the completion service."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Callable, List, Literal, Sequence

from chatmemory.errors import CompletionServiceError, StoreError

from .schemas import SalientFact, Turn

if TYPE_CHECKING:
    from chatmemory.infrastructure.base import StorageBackend
    from chatmemory.llm.base import CompletionService

    from .store import MessageStore

logger = logging.getLogger(__name__)

FACT_PREFIX = "FACT:"
NO_FACTS = "NO_FACTS"

EXTRACTION_PROMPT = f"""Read the conversation below and list short, durable facts about the user that are worth remembering for future conversations.

Rules:
- One fact per line, each line starting with "{FACT_PREFIX}" (e.g. "{FACT_PREFIX} Likes coffee")
- Only stable facts (name, job, location, preferences, relationships, ongoing projects), not passing moods
- Each fact is a single atomic statement about the user
- Do not include questions or guesses
- If there is nothing worth remembering, reply with exactly "{NO_FACTS}"

Conversation (oldest first):
"""

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_fact(content: str) -> str:
    """Case-folded, punctuation-free, whitespace-collapsed form of a fact."""
    text = _PUNCTUATION.sub("", content.casefold())
    return _WHITESPACE.sub(" ", text).strip()


def _exact(content: str) -> str:
    return content


class FactExtractor:
    """Extracts facts from recent turns and stores the new ones.

    Extraction is periodic on the turn count (every `interval` turns), not
    a threshold crossing. Dedup compares against every stored fact for the
    user; exact string matching unless normalized matching is chosen.
    """

    def __init__(
        self,
        backend: StorageBackend,
        store: MessageStore,
        completion: CompletionService,
        interval: int = 5,
        window: int = 10,
        matching: Literal["exact", "normalized"] = "exact",
    ) -> None:
        """Initialize the extractor.

        Args:
            backend: Durable store holding facts
            store: Message store used to read the extraction window
            completion: Completion service used for extraction
            interval: Extract whenever the turn count is a multiple of this
            window: Number of most recent turns to read
            matching: "exact" or "normalized" duplicate detection
        """
        self.backend = backend
        self.store = store
        self.completion = completion
        self.interval = interval
        self.window = window
        self.matching = matching

    @property
    def _match_key(self) -> Callable[[str], str]:
        return normalize_fact if self.matching == "normalized" else _exact

    def should_extract(self, turn_count: int) -> bool:
        """True when the turn count is a positive multiple of the interval."""
        return turn_count > 0 and turn_count % self.interval == 0

    def _format_conversation(self, turns_newest_first: Sequence[Turn]) -> str:
        lines = []
        for turn in reversed(turns_newest_first):
            speaker = "User" if turn.role == "user" else "Assistant"
            lines.append(f"{speaker}: {turn.content}")
        return "\n".join(lines)

    def _parse_response(self, content: str) -> List[str]:
        """Keep only FACT:-prefixed lines, without the prefix or repeats."""
        if content.strip() == NO_FACTS:
            return []

        facts: List[str] = []
        for line in content.splitlines():
            line = line.strip()
            if not line.startswith(FACT_PREFIX):
                continue
            fact = line[len(FACT_PREFIX):].strip()
            if fact and fact not in facts:
                facts.append(fact)
        return facts

    async def extract_facts(self, turns: Sequence[Turn]) -> List[str]:
        """Extract candidate facts from a newest-first window of turns.

        Returns:
            Candidate facts, empty if none found or on completion failure
        """
        if not turns:
            return []

        prompt = EXTRACTION_PROMPT + self._format_conversation(turns)

        try:
            response = await self.completion.complete(prompt)
        except CompletionServiceError as e:
            logger.warning(f"Fact extraction failed: {e}")
            return []

        return self._parse_response(response)

    async def dedupe_and_persist(self, user_id: str, candidate_facts: Sequence[str]) -> List[str]:
        """Insert the candidates the user doesn't already have.

        Fails closed: if existing facts cannot be loaded nothing is inserted.

        Returns:
            The fact contents that were inserted
        """
        if not candidate_facts:
            return []

        try:
            existing = await self.backend.list_facts(user_id)
        except StoreError as e:
            logger.error(f"Error fetching existing salient memories for user {user_id}: {e}")
            return []

        key = self._match_key
        seen = {key(fact.content) for fact in existing}
        new_facts = []
        for fact in candidate_facts:
            if key(fact) not in seen:
                seen.add(key(fact))
                new_facts.append(fact)

        if not new_facts:
            logger.debug(f"No new salient memories for user {user_id}")
            return []

        await self.backend.insert_facts(user_id, new_facts)
        logger.info(f"Saved {len(new_facts)} new salient memories for user {user_id}")
        return new_facts

    async def list_facts(self, user_id: str) -> List[SalientFact]:
        """All stored facts for the user, oldest first."""
        return await self.backend.list_facts(user_id)

    async def run(self, user_id: str) -> List[str]:
        """Extract from the newest window of turns and store new facts.

        Raises:
            StoreError: If reading turns or inserting facts fails
        """
        turns = await self.store.all_turns_descending(user_id, self.window)
        candidates = await self.extract_facts(turns)
        if not candidates:
            return []
        return await self.dedupe_and_persist(user_id, candidates)
