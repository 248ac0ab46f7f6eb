"""One assistant chat turn, end to end.

1. Load profile, memories and recent history for the owner
2. Persist the user's message
3. Generate the reply (grounded with web data when the message needs it)
4. Persist the reply
5. Run the intent processor over the turn
"""

import logging

from kota.chains.assistant_reply import generate_reply
from kota.chains.intent_processor import IntentProcessor
from kota.core.clock import user_now
from kota.core.config import get_settings
from kota.core.logging import get_logger, log_with_context
from kota.core.schemas_assistant import ChatTurnResult
from kota.core.schemas_entities import EntityKind
from kota.db.conversations import add_message, recent_history
from kota.db.entities import list_records

logger = get_logger(__name__)


def _load_profile(owner: str) -> dict | None:
    profiles = list_records(EntityKind.PROFILE, owner, limit=1)
    return profiles[0] if profiles else None


async def run_chat_turn(owner: str, message: str) -> ChatTurnResult:
    """
    Answer a user message and act on any intents in it.

    Args:
        owner: Owner identity (email)
        message: The user's chat message

    Returns:
        ChatTurnResult with the reply, created item labels and proposals
    """
    settings = get_settings()
    now = user_now()

    profile = _load_profile(owner)
    memories = list_records(EntityKind.MEMORY, owner, order_by="-importance")
    history = recent_history(owner, limit=settings.CHAT_HISTORY_LIMIT)

    add_message(owner, "user", message)

    reply = await generate_reply(message, history, profile, memories, now, owner=owner)
    add_message(owner, "assistant", reply)

    conversation_context = "\n".join(m["content"] or "" for m in history)
    intents = await IntentProcessor(owner, now=now).process_message(
        message, reply, conversation_context
    )

    log_with_context(
        logger,
        logging.INFO,
        "Chat turn complete",
        owner=owner,
        proposals=len(intents.proposals),
        created=len(intents.created_items),
    )
    return ChatTurnResult(
        reply=reply,
        created_items=intents.created_items,
        proposals=intents.proposals,
    )
