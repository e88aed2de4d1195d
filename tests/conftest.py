"""Shared fixtures: in-memory backend, scripted completion service, wired components."""

from contextlib import asynccontextmanager
from typing import Callable, List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from chatmemory.config import Settings
from chatmemory.infrastructure import InMemoryBackend
from chatmemory.llm import CompletionService, Prompt
from chatmemory.main import create_app
from chatmemory.memory import MemoryComponents, build_memory


class ScriptedCompletion(CompletionService):
    """CompletionService double that records prompts and returns scripted text."""

    def __init__(self, reply: str = "Test AI response") -> None:
        self.reply = reply
        self.calls: List[Prompt] = []
        self.error: Optional[Exception] = None
        self.handler: Optional[Callable[[Prompt], str]] = None

    async def complete(self, prompt: Prompt) -> str:
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        if self.handler is not None:
            return self.handler(prompt)
        return self.reply

    @property
    def chat_calls(self) -> list:
        """Calls made with a context sequence (the reply path)."""
        return [c for c in self.calls if not isinstance(c, str)]

    @property
    def text_calls(self) -> List[str]:
        """Calls made with a plain prompt (summaries and extraction)."""
        return [c for c in self.calls if isinstance(c, str)]


@pytest.fixture
def settings() -> Settings:
    """Settings with default memory policy, ignoring any local .env file."""
    return Settings(_env_file=None, storage_mode="memory")


@pytest.fixture
def backend() -> InMemoryBackend:
    """Create an empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def completion() -> ScriptedCompletion:
    """Create a scripted completion service."""
    return ScriptedCompletion()


@pytest.fixture
def memory(backend: InMemoryBackend, completion: ScriptedCompletion, settings: Settings) -> MemoryComponents:
    """Memory components wired the same way as the app lifespan."""
    return build_memory(backend, completion, settings)


@pytest.fixture
def seed_turns(backend: InMemoryBackend):
    """Save alternating user/assistant turns directly, bypassing maintenance."""

    async def _seed(user_id: str, count: int, start: int = 0) -> None:
        for i in range(start, start + count):
            role = "user" if i % 2 == 0 else "assistant"
            await backend.insert_turn(user_id, role, f"message {i}")

    return _seed


@pytest.fixture
def app(memory: MemoryComponents) -> FastAPI:
    """FastAPI app whose lifespan installs the test components instead of real clients."""
    application = create_app()

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        app.state.memory = memory
        yield
        await memory.scheduler.drain()

    application.router.lifespan_context = test_lifespan
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """TestClient running the test lifespan on a single event loop."""
    with TestClient(app) as test_client:
        yield test_client
