"""Database operations for assistant conversation history."""

import logging

from kota.core.logging import get_logger, log_with_context
from kota.core.schemas_entities import EntityKind
from kota.db.entities import OWNER_FIELD, create_record, list_records
from kota.db.supabase_client import get_supabase

logger = get_logger(__name__)


def add_message(owner: str, role: str, message: str) -> dict:
    """Append one chat message to the owner's history."""
    return create_record(EntityKind.CONVERSATION, owner, {"role": role, "message": message})


def list_conversation(owner: str, limit: int | None = None) -> list[dict]:
    """List the owner's messages, newest first."""
    return list_records(EntityKind.CONVERSATION, owner, order_by="-created_at", limit=limit)


def recent_history(owner: str, limit: int = 5) -> list[dict]:
    """Return the last `limit` messages oldest-first as {role, content} dicts."""
    rows = list_conversation(owner, limit=limit)
    return [
        {"role": row.get("role") or "user", "content": row.get("message") or ""}
        for row in reversed(rows)
    ]


def clear_history(owner: str) -> int:
    """Delete every conversation row for the owner. Returns rows removed."""
    supabase = get_supabase()
    result = supabase.table("conversations").delete().eq(OWNER_FIELD, owner).execute()
    removed = len(result.data or [])
    log_with_context(
        logger, logging.INFO, "Cleared conversation history", owner=owner, removed=removed
    )
    return removed
