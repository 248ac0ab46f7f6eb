"""Per-kind LLM extraction for detected intents.

Each function makes exactly one structured `invoke_llm` call and validates
the result into an extraction model. A result whose required fields are null
or blank is returned as None. API and validation errors propagate; the
intent processor decides what a failure means.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from kota.chains.intent_prompts import (
    CREATION_PROMPTS,
    DELETION_KINDS_TEXT,
    DELETION_PROMPT,
    DELETION_SCHEMA,
    EXTRACTION_SYSTEM,
    MOVE_PROMPT,
    MOVE_SCHEMA,
    PROMPT_CHOICES,
)
from kota.core.llm import invoke_llm
from kota.core.logging import get_logger
from kota.core.schemas_entities import EntityKind
from kota.core.schemas_intents import (
    AssetExtraction,
    BillExtraction,
    ContactExtraction,
    DeletionExtraction,
    EventExtraction,
    ExtractionBase,
    LearningExtraction,
    MemoryExtraction,
    MoveExtraction,
    ProjectExtraction,
    SubscriptionExtraction,
    TaskExtraction,
)

logger = get_logger(__name__)

EXTRACTION_MODELS: dict[EntityKind, type[ExtractionBase]] = {
    EntityKind.TASK: TaskExtraction,
    EntityKind.EVENT: EventExtraction,
    EntityKind.PROJECT: ProjectExtraction,
    EntityKind.CONTACT: ContactExtraction,
    EntityKind.BILL: BillExtraction,
    EntityKind.SUBSCRIPTION: SubscriptionExtraction,
    EntityKind.LEARNING: LearningExtraction,
    EntityKind.ASSET: AssetExtraction,
    EntityKind.MEMORY: MemoryExtraction,
}

# Conversation context is clipped to keep extraction prompts small
MAX_CONTEXT_CHARS = 4000


def _complete_or_none(extraction: ExtractionBase, label: str) -> ExtractionBase | None:
    missing = extraction.missing_required()
    if missing:
        logger.info(f"{label} extraction suppressed, missing {', '.join(missing)}")
        return None
    return extraction


async def extract_deletion(message: str, owner: str | None = None) -> DeletionExtraction | None:
    """Ask which record kind and item the user wants deleted."""
    prompt = DELETION_PROMPT.format(message=message, kinds=DELETION_KINDS_TEXT)
    raw = await invoke_llm(
        prompt,
        DELETION_SCHEMA,
        system=EXTRACTION_SYSTEM,
        workflow="intent_delete",
        owner=owner,
    )
    return _complete_or_none(DeletionExtraction.model_validate(raw), "Deletion")


async def extract_move(message: str, owner: str | None = None) -> MoveExtraction | None:
    """Ask which item moves from which kind to which kind."""
    prompt = MOVE_PROMPT.format(message=message)
    raw = await invoke_llm(
        prompt,
        MOVE_SCHEMA,
        system=EXTRACTION_SYSTEM,
        workflow="intent_move",
        owner=owner,
    )
    return _complete_or_none(MoveExtraction.model_validate(raw), "Move")


async def extract_creation_fields(
    kind: EntityKind,
    message: str,
    *,
    now: datetime,
    assistant_reply: str = "",
    context: str = "",
    properties: list[str] | None = None,
    owner: str | None = None,
) -> ExtractionBase | None:
    """
    Extract the fields for a new record of one kind.

    Args:
        kind: Entity kind whose gate fired
        message: The user's chat message
        now: Current time in the user's time zone
        assistant_reply: The assistant's reply to the message (memory prompts)
        context: Recent conversation text for resolving references
        properties: Names of the owner's properties (asset prompts)
        owner: Owner identity for usage logs

    Returns:
        Validated extraction, or None when a required field is missing

    Raises:
        KeyError: If the kind has no extraction template
    """
    template, schema = CREATION_PROMPTS[kind]
    values: dict[str, Any] = {
        "message": message,
        "assistant_reply": assistant_reply,
        "context": (context or "(none)")[-MAX_CONTEXT_CHARS:],
        "current_datetime": now.replace(microsecond=0).isoformat(),
        "current_date": now.date().isoformat(),
        "timezone": now.tzname() or "local",
        "properties": ", ".join(properties) if properties else "None",
        **PROMPT_CHOICES.get(kind, {}),
    }
    prompt = template.format(**values)

    raw = await invoke_llm(
        prompt,
        schema,
        system=EXTRACTION_SYSTEM,
        workflow=f"intent_{kind.value}",
        owner=owner,
    )
    extraction = EXTRACTION_MODELS[kind].model_validate(raw)
    logger.debug(f"{kind.value} extraction result: {extraction.model_dump(exclude_none=True)}")
    return _complete_or_none(extraction, kind.value.title())
