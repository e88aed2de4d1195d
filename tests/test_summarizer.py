"""Tests for the Summarizer."""

from unittest.mock import AsyncMock

import pytest

from chatmemory.errors import CompletionServiceError, StoreError
from chatmemory.memory import MemoryComponents, Summarizer
from chatmemory.memory.summarizer import SUMMARY_FAILED, format_conversation


@pytest.fixture
def summarizer(memory: MemoryComponents) -> Summarizer:
    return memory.summarizer


class TestShouldSummarize:
    """Tests for the summarization trigger."""

    @pytest.mark.parametrize(
        "count,expected",
        [(0, False), (39, False), (40, True), (41, True), (50, True)],
    )
    def test_threshold_is_inclusive(self, summarizer: Summarizer, count: int, expected: bool):
        """Summarization fires once the count reaches the threshold."""
        assert summarizer.should_summarize(count) is expected


class TestSummarize:
    """Tests for summary generation."""

    @pytest.mark.asyncio
    async def test_prompt_contains_turns_in_order(self, summarizer: Summarizer, completion, backend):
        """The prompt renders the turns as role: content lines, oldest first."""
        first = await backend.insert_turn("u1", "user", "I like tea")
        second = await backend.insert_turn("u1", "assistant", "Noted")
        completion.reply = "  The user likes tea.  "

        summary = await summarizer.summarize([first, second])

        assert summary == "The user likes tea."
        prompt = completion.text_calls[0]
        assert "user: I like tea\nassistant: Noted" in prompt

    @pytest.mark.asyncio
    async def test_completion_failure_returns_sentinel(self, summarizer: Summarizer, completion, backend):
        """Completion errors are reported with the failure sentinel, not raised."""
        turn = await backend.insert_turn("u1", "user", "hello")
        completion.error = CompletionServiceError("service down")

        assert await summarizer.summarize([turn]) == SUMMARY_FAILED

    def test_format_conversation_empty(self):
        assert format_conversation([]) == ""


class TestRun:
    """Tests for the full summarization run."""

    @pytest.mark.asyncio
    async def test_run_summarizes_newest_window(self, summarizer: Summarizer, completion, backend, seed_turns):
        """Only the newest max_messages turns feed the summary, oldest first."""
        await seed_turns("u1", 60)
        completion.reply = "Summary of the chat"

        summary = await summarizer.run("u1")

        assert summary is not None
        assert summary.content == "Summary of the chat"
        prompt = completion.text_calls[0]
        assert "message 10" in prompt
        assert "message 59" in prompt
        assert "message 9\n" not in prompt
        assert prompt.index("message 10") < prompt.index("message 59")
        stored = await backend.get_summary("u1")
        assert stored.content == "Summary of the chat"

    @pytest.mark.asyncio
    async def test_run_overwrites_previous_summary(self, summarizer: Summarizer, completion, backend, seed_turns):
        """Each run replaces the single stored summary."""
        await seed_turns("u1", 40)
        completion.reply = "first"
        first = await summarizer.run("u1")
        completion.reply = "second"
        second = await summarizer.run("u1")

        assert first.id == second.id
        assert (await backend.get_summary("u1")).content == "second"

    @pytest.mark.asyncio
    async def test_failed_summary_is_not_persisted(self, summarizer: Summarizer, completion, backend, seed_turns):
        """The sentinel never overwrites a good summary."""
        await seed_turns("u1", 40)
        await backend.upsert_summary("u1", "good summary")
        completion.error = CompletionServiceError("service down")

        assert await summarizer.run("u1") is None
        assert (await backend.get_summary("u1")).content == "good summary"

    @pytest.mark.asyncio
    async def test_empty_result_is_not_persisted(self, summarizer: Summarizer, completion, backend, seed_turns):
        await seed_turns("u1", 40)
        completion.reply = "   "

        assert await summarizer.run("u1") is None
        assert await backend.get_summary("u1") is None

    @pytest.mark.asyncio
    async def test_run_without_turns(self, summarizer: Summarizer, completion):
        """No turns means no completion call and no summary."""
        assert await summarizer.run("nobody") is None
        assert completion.calls == []

    @pytest.mark.asyncio
    async def test_merge_strategy_includes_previous_summary(self, memory, completion, backend, seed_turns):
        """With the merge strategy the previous summary is part of the prompt."""
        summarizer = Summarizer(
            backend, memory.store, completion, threshold=2, max_messages=4, strategy="merge"
        )
        await seed_turns("u1", 4)
        await backend.upsert_summary("u1", "User is called Ana.")
        completion.reply = "merged"

        await summarizer.run("u1")

        prompt = completion.text_calls[0]
        assert "Previous summary:\nUser is called Ana." in prompt
        assert (await backend.get_summary("u1")).content == "merged"

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, summarizer: Summarizer, completion, backend, seed_turns, monkeypatch):
        """Store failures are left to the caller (the background scheduler)."""
        await seed_turns("u1", 40)
        monkeypatch.setattr(backend, "upsert_summary", AsyncMock(side_effect=StoreError("write failed")))

        with pytest.raises(StoreError):
            await summarizer.run("u1")
