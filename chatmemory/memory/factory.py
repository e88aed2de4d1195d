"""Wiring of the memory components around shared clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .context import ContextAssembler
from .extractor import FactExtractor
from .persona import PersonaProvider
from .scheduler import BackgroundScheduler
from .service import ChatService
from .store import MessageStore
from .summarizer import Summarizer

if TYPE_CHECKING:
    from chatmemory.config import Settings
    from chatmemory.infrastructure.base import StorageBackend
    from chatmemory.infrastructure.redis import AsyncRedisPersonaCache
    from chatmemory.llm.base import CompletionService


@dataclass
class MemoryComponents:
    """Every memory component built over one backend and completion service."""

    store: MessageStore
    personas: PersonaProvider
    summarizer: Summarizer
    extractor: FactExtractor
    assembler: ContextAssembler
    scheduler: BackgroundScheduler
    chat: ChatService


def build_memory(
    backend: StorageBackend,
    completion: CompletionService,
    settings: Settings,
    persona_cache: Optional[AsyncRedisPersonaCache] = None,
) -> MemoryComponents:
    """Build the memory components and connect the scheduler to the store.

    Clients are created once per process and shared read-only by every
    component built here.
    """
    store = MessageStore(backend, recent_window=settings.recent_history_window)
    personas = PersonaProvider(backend, settings.default_persona, cache=persona_cache)
    summarizer = Summarizer(
        backend,
        store,
        completion,
        threshold=settings.summary_threshold,
        max_messages=settings.max_messages_for_summary,
        strategy=settings.summary_strategy,
    )
    extractor = FactExtractor(
        backend,
        store,
        completion,
        interval=settings.salient_extraction_interval,
        window=settings.salient_extraction_window,
        matching=settings.fact_matching,
    )
    scheduler = BackgroundScheduler(
        store,
        extractor,
        summarizer,
        failure_log_size=settings.background_failure_log_size,
    )
    store.after_save = scheduler.on_turn_saved

    assembler = ContextAssembler(backend, personas)
    chat = ChatService(
        store,
        assembler,
        completion,
        reply_timeout_seconds=settings.reply_timeout_seconds,
    )
    return MemoryComponents(
        store=store,
        personas=personas,
        summarizer=summarizer,
        extractor=extractor,
        assembler=assembler,
        scheduler=scheduler,
        chat=chat,
    )
