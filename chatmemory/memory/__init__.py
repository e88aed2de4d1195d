"""Conversation memory: turn log, summaries, salient facts and context assembly.

Main components:
- MessageStore: append-only turn log, trigger point for maintenance
- PersonaProvider: per-user system instruction with a default fallback
- Summarizer: threshold-triggered summary regeneration
- FactExtractor: periodic fact extraction with dedup
- ContextAssembler: fixed-order context for the completion service
- BackgroundScheduler: detached maintenance after each saved turn
- ChatService: the handle-one-turn entry point
"""

from .context import ContextAssembler
from .extractor import FactExtractor
from .factory import MemoryComponents, build_memory
from .persona import PersonaProvider
from .scheduler import BackgroundScheduler
from .schemas import ContextEntry, MaintenanceFailure, Persona, SalientFact, Summary, Turn
from .service import ChatService
from .store import MessageStore
from .summarizer import Summarizer

__all__ = [
    "BackgroundScheduler",
    "ChatService",
    "ContextAssembler",
    "ContextEntry",
    "FactExtractor",
    "MaintenanceFailure",
    "MemoryComponents",
    "MessageStore",
    "Persona",
    "PersonaProvider",
    "SalientFact",
    "Summarizer",
    "Summary",
    "Turn",
    "build_memory",
]
