"""Tests for per-kind LLM extraction."""

from datetime import datetime
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import pytest

from kota.chains.extract_intent_fields import (
    MAX_CONTEXT_CHARS,
    extract_creation_fields,
    extract_deletion,
    extract_move,
)
from kota.chains.intent_prompts import EXTRACTION_SYSTEM, TASK_SCHEMA
from kota.core.exceptions import LLMResponseError
from kota.core.schemas_entities import EntityKind
from kota.core.schemas_intents import AssetExtraction, TaskExtraction

NOW = datetime(2026, 10, 17, 9, 30, tzinfo=ZoneInfo("America/Chicago"))
LLM = "kota.chains.extract_intent_fields.invoke_llm"


class TestExtractCreationFields:
    @pytest.mark.asyncio
    async def test_single_structured_call(self):
        with patch(LLM, new_callable=AsyncMock) as mock_llm:
            mock_llm.return_value = {"title": "Call John", "priority": "high", "due_date": None}
            result = await extract_creation_fields(
                EntityKind.TASK, "remind me to call John", now=NOW, owner="pat@example.com"
            )

        assert isinstance(result, TaskExtraction)
        assert result.title == "Call John"
        mock_llm.assert_awaited_once()
        prompt, schema = mock_llm.await_args.args
        kwargs = mock_llm.await_args.kwargs
        assert schema == TASK_SCHEMA
        assert kwargs["system"] == EXTRACTION_SYSTEM
        assert kwargs["workflow"] == "intent_task"
        assert kwargs["owner"] == "pat@example.com"
        assert "remind me to call John" in prompt
        assert "2026-10-17T09:30:00-05:00" in prompt
        assert "CDT" in prompt

    @pytest.mark.asyncio
    async def test_null_required_field_returns_none(self):
        with patch(LLM, new_callable=AsyncMock, return_value={"title": None}):
            result = await extract_creation_fields(EntityKind.TASK, "add a task", now=NOW)
        assert result is None

    @pytest.mark.asyncio
    async def test_blank_required_field_returns_none(self):
        with patch(LLM, new_callable=AsyncMock, return_value={"vendor": "  ", "amount": 9}):
            result = await extract_creation_fields(
                EntityKind.SUBSCRIPTION, "add a subscription", now=NOW
            )
        assert result is None

    @pytest.mark.asyncio
    async def test_unknown_keys_are_ignored(self):
        with patch(LLM, new_callable=AsyncMock, return_value={"name": "TV", "color": "black"}):
            result = await extract_creation_fields(EntityKind.ASSET, "add TV asset", now=NOW)
        assert isinstance(result, AssetExtraction)
        assert result.name == "TV"

    @pytest.mark.asyncio
    async def test_context_is_clipped(self):
        context = "x" * (MAX_CONTEXT_CHARS + 500)
        with patch(LLM, new_callable=AsyncMock, return_value={"title": "T"}) as mock_llm:
            await extract_creation_fields(EntityKind.TASK, "add task", now=NOW, context=context)
        prompt = mock_llm.await_args.args[0]
        assert "x" * MAX_CONTEXT_CHARS in prompt
        assert "x" * (MAX_CONTEXT_CHARS + 1) not in prompt

    @pytest.mark.asyncio
    async def test_asset_prompt_lists_properties(self):
        with patch(LLM, new_callable=AsyncMock, return_value={"name": "TV"}) as mock_llm:
            await extract_creation_fields(
                EntityKind.ASSET, "add TV asset", now=NOW, properties=["Lake House", "Condo"]
            )
        assert "Lake House, Condo" in mock_llm.await_args.args[0]

    @pytest.mark.asyncio
    async def test_memory_prompt_includes_reply(self):
        with patch(LLM, new_callable=AsyncMock, return_value={"key": "k", "value": "v"}) as mock_llm:
            await extract_creation_fields(
                EntityKind.MEMORY,
                "I live in Austin",
                now=NOW,
                assistant_reply="Austin is great!",
            )
        assert "Austin is great!" in mock_llm.await_args.args[0]

    @pytest.mark.asyncio
    async def test_llm_errors_propagate(self):
        with patch(LLM, new_callable=AsyncMock, side_effect=LLMResponseError("bad json")):
            with pytest.raises(LLMResponseError):
                await extract_creation_fields(EntityKind.TASK, "add task", now=NOW)


class TestExtractDeletionAndMove:
    @pytest.mark.asyncio
    async def test_deletion(self):
        with patch(LLM, new_callable=AsyncMock) as mock_llm:
            mock_llm.return_value = {"entity": "subscription", "item_name": "Netflix"}
            result = await extract_deletion("cancel netflix")

        assert result.entity == "subscription"
        assert result.item_name == "Netflix"
        assert mock_llm.await_args.kwargs["workflow"] == "intent_delete"
        assert "subscription" in mock_llm.await_args.args[0]

    @pytest.mark.asyncio
    async def test_deletion_without_item_returns_none(self):
        with patch(LLM, new_callable=AsyncMock, return_value={"entity": "bill", "item_name": None}):
            assert await extract_deletion("delete it") is None

    @pytest.mark.asyncio
    async def test_move(self):
        with patch(LLM, new_callable=AsyncMock) as mock_llm:
            mock_llm.return_value = {
                "item_name": "Hulu",
                "from_entity": "bill",
                "to_entity": "subscription",
                "amount": 7.99,
                "interval": "monthly",
            }
            result = await extract_move("remove Hulu from bills and add to subscriptions")

        assert result.to_entity == "subscription"
        assert result.amount == 7.99
        assert mock_llm.await_args.kwargs["workflow"] == "intent_move"

    @pytest.mark.asyncio
    async def test_move_without_destination_returns_none(self):
        with patch(LLM, new_callable=AsyncMock) as mock_llm:
            mock_llm.return_value = {"item_name": "Hulu", "from_entity": "bill", "to_entity": None}
            assert await extract_move("remove Hulu and add it back") is None
