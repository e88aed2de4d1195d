"""Tests for salient fact extraction."""

from unittest.mock import AsyncMock

import pytest

from chatmemory.errors import CompletionServiceError, StoreError
from chatmemory.memory import FactExtractor, MemoryComponents
from chatmemory.memory.extractor import EXTRACTION_PROMPT, normalize_fact


@pytest.fixture
def extractor(memory: MemoryComponents) -> FactExtractor:
    return memory.extractor


class TestShouldExtract:
    """Tests for the periodic extraction trigger."""

    @pytest.mark.parametrize(
        "count,expected",
        [(0, False), (1, False), (4, False), (5, True), (6, False), (10, True), (15, True)],
    )
    def test_multiples_of_interval(self, extractor: FactExtractor, count: int, expected: bool):
        assert extractor.should_extract(count) is expected


class TestParseResponse:
    """Tests for parsing the extraction reply."""

    def test_no_facts_marker(self, extractor: FactExtractor):
        assert extractor._parse_response("NO_FACTS") == []
        assert extractor._parse_response("  NO_FACTS\n") == []

    def test_only_prefixed_lines_are_kept(self, extractor: FactExtractor):
        """Lines without the FACT: prefix are ignored and the prefix is removed."""
        response = "Here is what I found:\nFACT: Likes coffee\n- not a fact\n  FACT:  Lives in Lisbon  \nFACT:"

        assert extractor._parse_response(response) == ["Likes coffee", "Lives in Lisbon"]

    def test_repeats_in_one_reply_are_dropped(self, extractor: FactExtractor):
        assert extractor._parse_response("FACT: Likes coffee\nFACT: Likes coffee") == ["Likes coffee"]


class TestExtractFacts:
    """Tests for the completion call."""

    @pytest.mark.asyncio
    async def test_prompt_lists_turns_oldest_first(self, extractor: FactExtractor, completion, backend):
        """Newest-first input is rendered oldest first with speaker labels."""
        older = await backend.insert_turn("u1", "user", "My name is Ana")
        newer = await backend.insert_turn("u1", "assistant", "Nice to meet you, Ana")
        completion.reply = "FACT: Name is Ana"

        facts = await extractor.extract_facts([newer, older])

        assert facts == ["Name is Ana"]
        prompt = completion.text_calls[0]
        assert prompt.startswith(EXTRACTION_PROMPT)
        assert prompt.endswith("User: My name is Ana\nAssistant: Nice to meet you, Ana")

    @pytest.mark.asyncio
    async def test_completion_failure_yields_no_facts(self, extractor: FactExtractor, completion, backend):
        turn = await backend.insert_turn("u1", "user", "hello")
        completion.error = CompletionServiceError("service down")

        assert await extractor.extract_facts([turn]) == []

    @pytest.mark.asyncio
    async def test_no_turns_skips_completion(self, extractor: FactExtractor, completion):
        assert await extractor.extract_facts([]) == []
        assert completion.calls == []


class TestDedupeAndPersist:
    """Tests for duplicate detection and storage."""

    @pytest.mark.asyncio
    async def test_only_new_facts_are_inserted(self, extractor: FactExtractor, backend):
        """Facts already stored for the user are skipped."""
        await backend.insert_facts("u1", ["Likes coffee"])

        inserted = await extractor.dedupe_and_persist("u1", ["Likes coffee", "Lives in Lisbon"])

        assert inserted == ["Lives in Lisbon"]
        assert [f.content for f in await backend.list_facts("u1")] == ["Likes coffee", "Lives in Lisbon"]

    @pytest.mark.asyncio
    async def test_exact_matching_keeps_case_variants(self, extractor: FactExtractor, backend):
        await backend.insert_facts("u1", ["Likes coffee"])

        inserted = await extractor.dedupe_and_persist("u1", ["likes coffee."])

        assert inserted == ["likes coffee."]

    @pytest.mark.asyncio
    async def test_normalized_matching(self, memory: MemoryComponents, completion, backend):
        """Normalized matching ignores case, punctuation and spacing."""
        extractor = FactExtractor(backend, memory.store, completion, matching="normalized")
        await backend.insert_facts("u1", ["Likes coffee"])

        inserted = await extractor.dedupe_and_persist("u1", ["likes   COFFEE.", "Has a dog"])

        assert inserted == ["Has a dog"]

    @pytest.mark.asyncio
    async def test_facts_are_per_user(self, extractor: FactExtractor, backend):
        await backend.insert_facts("u2", ["Likes coffee"])

        assert await extractor.dedupe_and_persist("u1", ["Likes coffee"]) == ["Likes coffee"]

    @pytest.mark.asyncio
    async def test_fails_closed_when_existing_facts_unreadable(self, extractor: FactExtractor, backend, monkeypatch):
        """Nothing is inserted if existing facts cannot be loaded."""
        monkeypatch.setattr(backend, "list_facts", AsyncMock(side_effect=StoreError("read failed")))
        insert = AsyncMock()
        monkeypatch.setattr(backend, "insert_facts", insert)

        assert await extractor.dedupe_and_persist("u1", ["Likes coffee"]) == []
        insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_candidates(self, extractor: FactExtractor):
        assert await extractor.dedupe_and_persist("u1", []) == []


class TestRun:
    """Tests for a full extraction run."""

    @pytest.mark.asyncio
    async def test_run_reads_extraction_window(self, extractor: FactExtractor, completion, backend, seed_turns):
        """Only the newest `window` turns are sent for extraction."""
        await seed_turns("u1", 15)
        completion.reply = "FACT: Enjoys hiking"

        inserted = await extractor.run("u1")

        assert inserted == ["Enjoys hiking"]
        prompt = completion.text_calls[0]
        assert "message 5" in prompt
        assert "message 14" in prompt
        assert "message 4\n" not in prompt

    @pytest.mark.asyncio
    async def test_run_is_idempotent_for_same_reply(self, extractor: FactExtractor, completion, backend, seed_turns):
        await seed_turns("u1", 5)
        completion.reply = "FACT: Enjoys hiking"

        await extractor.run("u1")
        await extractor.run("u1")

        assert [f.content for f in await extractor.list_facts("u1")] == ["Enjoys hiking"]


def test_normalize_fact():
    assert normalize_fact("  Likes   Coffee!! ") == "likes coffee"
