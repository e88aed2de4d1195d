"""Per-user persona (system instruction) lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .schemas import Persona

if TYPE_CHECKING:
    from chatmemory.infrastructure.base import StorageBackend
    from chatmemory.infrastructure.redis import AsyncRedisPersonaCache

logger = logging.getLogger(__name__)


class PersonaProvider:
    """Resolves the system instruction for a user.

    Reads are cache-aside when a Redis cache is configured; saves write
    through to PostgreSQL first, then refresh the cache.
    """

    def __init__(
        self,
        backend: StorageBackend,
        default_persona: str,
        cache: Optional[AsyncRedisPersonaCache] = None,
    ) -> None:
        self.backend = backend
        self.default_persona = default_persona
        self.cache = cache

    def _cache_ready(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def get_persona(self, user_id: str) -> Optional[Persona]:
        """Return the stored persona row, or None.

        Raises:
            StoreError: If the lookup fails
        """
        return await self.backend.get_persona(user_id)

    async def save_persona(self, user_id: str, description: str) -> Persona:
        """Create or update the user's persona.

        Raises:
            StoreError: If the write fails
        """
        persona = await self.backend.upsert_persona(user_id, description)

        if self._cache_ready():
            if not await self.cache.set_description(user_id, persona.description):
                await self.cache.invalidate(user_id)

        logger.info(f"Persona saved for user {user_id}")
        return persona

    async def persona_for(self, user_id: str) -> str:
        """Return the user's persona description, or the default.

        Never raises: any lookup failure degrades to the default persona.
        """
        if self._cache_ready():
            cached = await self.cache.get_description(user_id)
            if cached:
                return cached

        try:
            persona = await self.get_persona(user_id)
        except Exception as e:
            logger.error(f"Error fetching persona for user {user_id}: {e}")
            return self.default_persona

        if persona is None or not persona.description:
            return self.default_persona

        if self._cache_ready():
            await self.cache.set_description(user_id, persona.description)

        return persona.description
