"""Storage backend interface for turns, summaries, facts and personas."""

from abc import ABC, abstractmethod
from typing import List, Optional

from chatmemory.memory.schemas import Persona, SalientFact, Summary, Turn


class StorageBackend(ABC):
    """Durable store keyed by user_id.

    Every method raises StoreError when the underlying store fails.
    """

    @abstractmethod
    async def insert_turn(self, user_id: str, role: str, content: str) -> Turn:
        """Append a turn and return it with its server-generated id and timestamp."""

    @abstractmethod
    async def fetch_turns(
        self, user_id: str, limit: Optional[int] = None, descending: bool = False
    ) -> List[Turn]:
        """Return up to `limit` turns ordered by timestamp (all when limit is None)."""

    @abstractmethod
    async def count_turns(self, user_id: str) -> int:
        """Return the number of stored turns for the user."""

    @abstractmethod
    async def get_summary(self, user_id: str) -> Optional[Summary]:
        """Return the user's summary, or None if there is none."""

    @abstractmethod
    async def upsert_summary(self, user_id: str, content: str) -> Summary:
        """Create or overwrite the user's summary."""

    @abstractmethod
    async def list_facts(self, user_id: str) -> List[SalientFact]:
        """Return all facts for the user in timestamp order."""

    @abstractmethod
    async def insert_facts(self, user_id: str, contents: List[str]) -> List[SalientFact]:
        """Insert facts as given (no dedup) and return the created rows."""

    @abstractmethod
    async def get_persona(self, user_id: str) -> Optional[Persona]:
        """Return the user's persona, or None if there is none."""

    @abstractmethod
    async def upsert_persona(self, user_id: str, description: str) -> Persona:
        """Create or update the user's persona."""

    async def close(self) -> None:
        """Release resources held by the backend."""
