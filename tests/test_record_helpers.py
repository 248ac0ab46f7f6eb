"""Tests for advice and email draft prompts."""

from unittest.mock import AsyncMock, patch

import pytest

from kota.chains.draft_email import build_draft_prompt, draft_email_body
from kota.chains.record_advice import advise_on_record, build_advice_prompt
from kota.core.schemas_entities import EntityKind


class TestAdvicePrompt:
    def test_task(self):
        prompt = build_advice_prompt(
            EntityKind.TASK,
            {"title": "File taxes", "priority": "high", "due_date": "2026-04-15"},
        )
        assert "Title: File taxes" in prompt
        assert "Priority: high" in prompt
        assert "Due date: April 15, 2026" in prompt
        assert "Notes: None" in prompt

    def test_bill(self):
        prompt = build_advice_prompt(
            EntityKind.BILL, {"name": "Visa", "amount": 300, "recurring": True}
        )
        assert "Amount: $300" in prompt
        assert "Recurring: Yes" in prompt
        assert "Due date: Not set" in prompt

    def test_other_kinds_raise(self):
        with pytest.raises(ValueError):
            build_advice_prompt(EntityKind.CONTACT, {"name": "Jo"})

    @pytest.mark.asyncio
    async def test_free_text_call(self):
        with patch("kota.chains.record_advice.invoke_llm", new_callable=AsyncMock) as mock_llm:
            mock_llm.return_value = "Break it down."
            assert await advise_on_record(EntityKind.TASK, {"title": "X"}) == "Break it down."
        assert mock_llm.await_args.kwargs["workflow"] == "advice_task"
        assert len(mock_llm.await_args.args) == 1


class TestDraftPrompt:
    def test_new_draft(self):
        prompt = build_draft_prompt("Lunch Friday", "casual")
        assert 'Write a casual email with the subject: "Lunch Friday"' in prompt
        assert "Create a complete email body." in prompt

    def test_improve_existing(self):
        prompt = build_draft_prompt("Lunch", "", "want to grab lunch")
        assert "Write a professional email" in prompt
        assert "Current draft:\nwant to grab lunch" in prompt

    @pytest.mark.asyncio
    async def test_draft_body(self):
        with patch("kota.chains.draft_email.invoke_llm", new_callable=AsyncMock) as mock_llm:
            mock_llm.return_value = "Hi Jo,"
            assert await draft_email_body("Lunch", owner="pat@example.com") == "Hi Jo,"
        assert mock_llm.await_args.kwargs["workflow"] == "email_draft"
