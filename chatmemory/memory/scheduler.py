"""Detached post-save memory maintenance (fact extraction and summarization)."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Deque, Dict, List, Set

from .schemas import MaintenanceFailure, Turn

if TYPE_CHECKING:
    from .extractor import FactExtractor
    from .store import MessageStore
    from .summarizer import Summarizer

logger = logging.getLogger(__name__)


class BackgroundScheduler:
    """Runs memory maintenance after each saved turn without blocking the reply.

    Each saved turn spawns one task named `memory-maintenance:<user_id>`.
    The task reads the turn count once, then runs fact extraction and
    summarization independently when their triggers fire. Errors are logged,
    counted and kept in a bounded failure log; they never reach the caller.

    Concurrent turns for one user are not serialized, so a trigger near a
    threshold may run twice or be skipped for a turn.
    """

    def __init__(
        self,
        store: MessageStore,
        extractor: FactExtractor,
        summarizer: Summarizer,
        failure_log_size: int = 100,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.summarizer = summarizer
        self._tasks: Set[asyncio.Task] = set()
        self.failures: Deque[MaintenanceFailure] = deque(maxlen=failure_log_size)
        self.spawned = 0
        self.completed = 0
        self.failed = 0

    def on_turn_saved(self, turn: Turn) -> None:
        """After-save hook for MessageStore: detach maintenance for the user."""
        self.spawn(f"memory-maintenance:{turn.user_id}", self.maintain(turn.user_id))

    def spawn(self, name: str, coro: Awaitable[Any]) -> asyncio.Task:
        """Start a named detached task and keep a reference until it finishes."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        self.spawned += 1
        task.add_done_callback(self._on_done)
        return task

    def _record_failure(self, task_name: str, branch: str, error: BaseException) -> None:
        self.failed += 1
        self.failures.append(
            MaintenanceFailure(
                task_name=task_name,
                branch=branch,
                error=f"{type(error).__name__}: {error}",
                occurred_at=datetime.now(timezone.utc),
            )
        )
        logger.error(f"Background {branch} failed in {task_name}: {error}")

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Background task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            self._record_failure(task.get_name(), "task", error)
        else:
            self.completed += 1

    async def maintain(self, user_id: str) -> None:
        """Evaluate both triggers for the user and run what is due."""
        task_name = f"memory-maintenance:{user_id}"

        try:
            count = await self.store.count_turns(user_id)
        except Exception as e:
            self._record_failure(task_name, "count", e)
            return

        if self.extractor.should_extract(count):
            try:
                await self.extractor.run(user_id)
            except Exception as e:
                self._record_failure(task_name, "extraction", e)

        if self.summarizer.should_summarize(count):
            try:
                await self.summarizer.run(user_id)
            except Exception as e:
                self._record_failure(task_name, "summarization", e)

    @property
    def pending(self) -> int:
        """Number of maintenance tasks still running."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every pending task (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def stats(self) -> Dict[str, Any]:
        """Counters and recent failures for health reporting."""
        recent: List[Dict[str, Any]] = [f.model_dump(mode="json") for f in self.failures]
        return {
            "spawned": self.spawned,
            "completed": self.completed,
            "failed": self.failed,
            "pending": self.pending,
            "recent_failures": recent,
        }
