"""Process-local storage backend for development and tests."""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from chatmemory.memory.schemas import Persona, SalientFact, Summary, Turn

from .base import StorageBackend

logger = logging.getLogger(__name__)


class InMemoryBackend(StorageBackend):
    """Keeps every table in dictionaries keyed by user_id.

    Insertion order doubles as timestamp order, so equal timestamps still
    replay in the order they were written. Nothing survives a restart.
    """

    def __init__(self) -> None:
        self._turns: Dict[str, List[Turn]] = defaultdict(list)
        self._summaries: Dict[str, Summary] = {}
        self._facts: Dict[str, List[SalientFact]] = defaultdict(list)
        self._personas: Dict[str, Persona] = {}
        self._last_timestamp = datetime.min.replace(tzinfo=timezone.utc)

    def _now(self) -> datetime:
        now = max(datetime.now(timezone.utc), self._last_timestamp)
        self._last_timestamp = now
        return now

    async def insert_turn(self, user_id: str, role: str, content: str) -> Turn:
        turn = Turn(
            id=str(uuid.uuid4()),
            user_id=user_id,
            role=role,
            content=content,
            timestamp=self._now(),
        )
        self._turns[user_id].append(turn)
        return turn

    async def fetch_turns(
        self, user_id: str, limit: Optional[int] = None, descending: bool = False
    ) -> List[Turn]:
        turns = self._turns.get(user_id, [])
        ordered = list(reversed(turns)) if descending else list(turns)
        return ordered if limit is None else ordered[:limit]

    async def count_turns(self, user_id: str) -> int:
        return len(self._turns.get(user_id, []))

    async def get_summary(self, user_id: str) -> Optional[Summary]:
        return self._summaries.get(user_id)

    async def upsert_summary(self, user_id: str, content: str) -> Summary:
        existing = self._summaries.get(user_id)
        summary = Summary(
            id=existing.id if existing else str(uuid.uuid4()),
            user_id=user_id,
            content=content,
            updated_at=self._now(),
        )
        self._summaries[user_id] = summary
        return summary

    async def list_facts(self, user_id: str) -> List[SalientFact]:
        return list(self._facts.get(user_id, []))

    async def insert_facts(self, user_id: str, contents: List[str]) -> List[SalientFact]:
        created = [
            SalientFact(
                id=str(uuid.uuid4()),
                user_id=user_id,
                content=content,
                timestamp=self._now(),
            )
            for content in contents
        ]
        self._facts[user_id].extend(created)
        return created

    async def get_persona(self, user_id: str) -> Optional[Persona]:
        return self._personas.get(user_id)

    async def upsert_persona(self, user_id: str, description: str) -> Persona:
        now = self._now()
        existing = self._personas.get(user_id)
        if existing:
            persona = existing.model_copy(update={"description": description, "updated_at": now})
        else:
            persona = Persona(
                id=str(uuid.uuid4()),
                user_id=user_id,
                description=description,
                created_at=now,
                updated_at=now,
            )
        self._personas[user_id] = persona
        return persona

    async def close(self) -> None:
        logger.info("In-memory backend closed")
