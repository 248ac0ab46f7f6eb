"""LLM invocation: structured JSON via forced tool use, or free text.

Every assistant reply and extraction goes through `invoke_llm`. With a JSON
schema the model is forced to call a single `submit_result` tool whose input
schema is that schema, so the tool input is the parsed result. Without a
schema the concatenated text blocks are returned.

Retries with exponential backoff on transient API errors.

Usage:
    from kota.core.llm import invoke_llm

    fields = await invoke_llm(prompt, response_json_schema=TASK_SCHEMA)
    reply = await invoke_llm(prompt, add_context_from_internet=True)
"""

from __future__ import annotations

import asyncio
import json
import re
import time
from typing import Any

from anthropic import (
    APIConnectionError,
    APITimeoutError,
    AsyncAnthropic,
    InternalServerError,
    RateLimitError,
)

from kota.core.config import get_settings
from kota.core.exceptions import LLMResponseError
from kota.core.llm_usage import log_llm_usage
from kota.core.logging import get_logger

logger = get_logger(__name__)

RESULT_TOOL_NAME = "submit_result"

_TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, InternalServerError, RateLimitError)


def _get_client() -> AsyncAnthropic:
    settings = get_settings()
    return AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)


def _strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_llm_json_dict(raw_output: str) -> dict:
    """
    Parse LLM output as a JSON object.

    Args:
        raw_output: Raw string from LLM response

    Returns:
        Parsed dict

    Raises:
        LLMResponseError: If the output is not a JSON object after cleanup
    """
    cleaned = _strip_llm_fences(raw_output)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"LLM output is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMResponseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _result_tool(schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": RESULT_TOOL_NAME,
        "description": "Submit the extracted result as structured JSON.",
        "input_schema": schema,
    }


def _web_search_tool(max_uses: int) -> dict[str, Any]:
    return {"type": "web_search_20250305", "name": "web_search", "max_uses": max_uses}


def _response_text(response: Any) -> str:
    parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
    return "".join(parts).strip()


def _structured_result(response: Any) -> dict:
    for block in response.content:
        if getattr(block, "type", None) == "tool_use" and block.name == RESULT_TOOL_NAME:
            return dict(block.input)

    logger.warning("No tool_use block in structured response, falling back to text")
    text = _response_text(response)
    if not text:
        raise LLMResponseError("Empty LLM response")
    return parse_llm_json_dict(text)


async def invoke_llm(
    prompt: str,
    response_json_schema: dict[str, Any] | None = None,
    *,
    add_context_from_internet: bool = False,
    system: str | None = None,
    model: str | None = None,
    max_tokens: int | None = None,
    workflow: str = "invoke_llm",
    owner: str | None = None,
) -> dict | str:
    """
    Send a prompt to the LLM.

    Args:
        prompt: User prompt text
        response_json_schema: JSON schema for a structured result; None for free text
        add_context_from_internet: Enable live web search grounding
        system: Optional system prompt
        model: Model override (defaults to EXTRACTION_MODEL for structured calls,
            CHAT_MODEL otherwise)
        max_tokens: Max output tokens override
        workflow: Name recorded in usage logs
        owner: Owner identity recorded in usage logs

    Returns:
        Parsed dict when a schema is given, otherwise the reply text

    Raises:
        LLMResponseError: If the response cannot be used
        anthropic.APIError: On non-transient API errors, or transient ones
            after retries are exhausted
    """
    settings = get_settings()
    structured = response_json_schema is not None
    model_name = model or (settings.EXTRACTION_MODEL if structured else settings.CHAT_MODEL)
    token_limit = max_tokens or (
        settings.EXTRACTION_MAX_TOKENS if structured else settings.CHAT_MAX_TOKENS
    )

    kwargs: dict[str, Any] = {
        "model": model_name,
        "max_tokens": token_limit,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system:
        kwargs["system"] = system

    tools: list[dict[str, Any]] = []
    if add_context_from_internet:
        tools.append(_web_search_tool(settings.WEB_SEARCH_MAX_USES))
    if structured:
        tools.append(_result_tool(response_json_schema))
        kwargs["temperature"] = 0.0
        if add_context_from_internet:
            # Forcing the result tool would skip the search
            kwargs["tool_choice"] = {"type": "auto"}
        else:
            kwargs["tool_choice"] = {"type": "tool", "name": RESULT_TOOL_NAME}
    if tools:
        kwargs["tools"] = tools

    client = _get_client()
    delay = settings.LLM_RETRY_INITIAL_DELAY
    attempt = 0
    while True:
        start = time.time()
        try:
            response = await client.messages.create(**kwargs)
            break
        except _TRANSIENT_ERRORS as e:
            if attempt >= settings.LLM_MAX_RETRIES:
                raise
            attempt += 1
            logger.warning(
                f"LLM attempt {attempt}/{settings.LLM_MAX_RETRIES + 1} failed "
                f"({type(e).__name__}), retrying in {delay}s"
            )
            await asyncio.sleep(delay)
            delay *= 2

    duration_ms = int((time.time() - start) * 1000)
    usage = getattr(response, "usage", None)
    log_llm_usage(
        workflow=workflow,
        model=model_name,
        tokens_input=getattr(usage, "input_tokens", 0) or 0,
        tokens_output=getattr(usage, "output_tokens", 0) or 0,
        duration_ms=duration_ms,
        owner=owner,
        web_search=add_context_from_internet,
    )

    if structured:
        return _structured_result(response)

    text = _response_text(response)
    if not text:
        raise LLMResponseError("Empty LLM response")
    return text
