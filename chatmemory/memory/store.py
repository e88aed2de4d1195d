"""Message store adapter over the durable turn log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from .schemas import Role, Turn

if TYPE_CHECKING:
    from chatmemory.infrastructure.base import StorageBackend

logger = logging.getLogger(__name__)

AfterSaveHook = Callable[[Turn], None]


class MessageStore:
    """Append-only turn log per user.

    `append_turn` is the single trigger point for background memory
    maintenance: once a turn is durably saved, the registered after-save hook
    is called synchronously and is expected to detach its own work.
    """

    def __init__(
        self,
        backend: StorageBackend,
        recent_window: int = 10,
        after_save: Optional[AfterSaveHook] = None,
    ) -> None:
        """Initialize message store.

        Args:
            backend: Durable store for turns
            recent_window: Default number of turns used for live context
            after_save: Hook invoked with every saved turn
        """
        self.backend = backend
        self.recent_window = recent_window
        self.after_save = after_save

    async def append_turn(self, user_id: str, content: str, role: Role) -> Turn:
        """Save a turn and notify the after-save hook.

        Raises:
            StoreError: If the write fails (the hook is not called)
        """
        turn = await self.backend.insert_turn(user_id, role, content)

        if self.after_save is not None:
            try:
                self.after_save(turn)
            except Exception as e:
                logger.error(f"After-save hook failed for user {user_id}: {e}")

        return turn

    async def recent_turns(self, user_id: str, limit: Optional[int] = None) -> List[Turn]:
        """Return up to `limit` most recent turns, oldest first."""
        limit = self.recent_window if limit is None else limit
        if limit <= 0:
            return []
        newest_first = await self.backend.fetch_turns(user_id, limit=limit, descending=True)
        return list(reversed(newest_first))

    async def all_turns_descending(self, user_id: str, limit: int) -> List[Turn]:
        """Return up to `limit` turns, newest first."""
        if limit <= 0:
            return []
        return await self.backend.fetch_turns(user_id, limit=limit, descending=True)

    async def count_turns(self, user_id: str) -> int:
        """Total number of turns stored for the user."""
        return await self.backend.count_turns(user_id)

    async def all_turns(self, user_id: str) -> List[Turn]:
        """Full turn log for the user, oldest first."""
        return await self.backend.fetch_turns(user_id)
