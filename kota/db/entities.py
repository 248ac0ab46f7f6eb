"""Owner-scoped CRUD over the entity store tables."""

import logging
from typing import Any
from uuid import UUID

from kota.core.exceptions import RecordNotFoundError, UnknownEntityKindError
from kota.core.logging import get_logger, log_with_context
from kota.core.schemas_entities import ENTITY_TABLES, EntityKind
from kota.db.supabase_client import get_supabase

logger = get_logger(__name__)

OWNER_FIELD = "created_by"

# Loose names the LLM or the API may use for a kind
_KIND_ALIASES: dict[str, EntityKind] = {
    "todo": EntityKind.TASK,
    "reminder": EntityKind.TASK,
    "appointment": EntityKind.EVENT,
    "meeting": EntityKind.EVENT,
    "calendar": EntityKind.EVENT,
    "learning_goal": EntityKind.LEARNING,
    "learning_goals": EntityKind.LEARNING,
    "vault": EntityKind.ASSET,
    "emaildraft": EntityKind.EMAIL_DRAFT,
    "draft": EntityKind.EMAIL_DRAFT,
    "memories": EntityKind.MEMORY,
    "properties": EntityKind.PROPERTY,
}


def resolve_kind(kind: str | EntityKind) -> EntityKind:
    """Normalize a kind name ("Bills", "learning_goals", "Task") to an EntityKind.

    Raises:
        UnknownEntityKindError: If the name matches no kind
    """
    if isinstance(kind, EntityKind):
        return kind
    normalized = str(kind).strip().lower().replace(" ", "_").replace("-", "_")
    if normalized in _KIND_ALIASES:
        return _KIND_ALIASES[normalized]
    for candidate in (normalized, normalized.rstrip("s")):
        try:
            return EntityKind(candidate)
        except ValueError:
            continue
    for k, table in ENTITY_TABLES.items():
        if table == normalized:
            return k
    raise UnknownEntityKindError(str(kind))


def _table(kind: str | EntityKind) -> str:
    return ENTITY_TABLES[resolve_kind(kind)]


def list_records(
    kind: str | EntityKind,
    owner: str,
    order_by: str | None = None,
    limit: int | None = None,
) -> list[dict]:
    """List an owner's records of one kind.

    Args:
        kind: Entity kind
        owner: Owner identity (email) stored in created_by
        order_by: Column to sort by; prefix with '-' for descending
        limit: Optional max rows

    Returns:
        List of record dicts
    """
    return filter_records(kind, owner, order_by=order_by, limit=limit)


def filter_records(
    kind: str | EntityKind,
    owner: str,
    order_by: str | None = None,
    limit: int | None = None,
    **equals: Any,
) -> list[dict]:
    """List an owner's records matching column equality filters."""
    supabase = get_supabase()
    query = supabase.table(_table(kind)).select("*").eq(OWNER_FIELD, owner)
    for column, value in equals.items():
        query = query.eq(column, str(value) if isinstance(value, UUID) else value)
    if order_by:
        desc = order_by.startswith("-")
        query = query.order(order_by.lstrip("-"), desc=desc)
    if limit:
        query = query.limit(limit)
    result = query.execute()
    return result.data or []


def get_record(kind: str | EntityKind, owner: str, record_id: str | UUID) -> dict:
    """Get one record by ID.

    Raises:
        RecordNotFoundError: If the record is missing or owned by someone else
    """
    supabase = get_supabase()
    result = (
        supabase.table(_table(kind))
        .select("*")
        .eq("id", str(record_id))
        .eq(OWNER_FIELD, owner)
        .execute()
    )
    if not result.data:
        raise RecordNotFoundError(resolve_kind(kind).value, str(record_id))
    return result.data[0]


def create_record(kind: str | EntityKind, owner: str, data: dict[str, Any]) -> dict:
    """Insert a record stamped with its owner."""
    supabase = get_supabase()
    row = {**data, OWNER_FIELD: owner}
    result = supabase.table(_table(kind)).insert(row).execute()
    if not result.data:
        raise ValueError(f"No data returned from {resolve_kind(kind).value} insert")
    log_with_context(
        logger,
        logging.DEBUG,
        "Created record",
        owner=owner,
        entity_kind=resolve_kind(kind),
        record_id=result.data[0].get("id"),
    )
    return result.data[0]


def update_record(
    kind: str | EntityKind,
    owner: str,
    record_id: str | UUID,
    data: dict[str, Any],
) -> dict:
    """Update an owner's record.

    Raises:
        RecordNotFoundError: If no row was updated
    """
    supabase = get_supabase()
    updates = {k: v for k, v in data.items() if k not in ("id", OWNER_FIELD)}
    result = (
        supabase.table(_table(kind))
        .update(updates)
        .eq("id", str(record_id))
        .eq(OWNER_FIELD, owner)
        .execute()
    )
    if not result.data:
        raise RecordNotFoundError(resolve_kind(kind).value, str(record_id))
    return result.data[0]


def delete_record(kind: str | EntityKind, owner: str, record_id: str | UUID) -> None:
    """Delete an owner's record.

    Raises:
        RecordNotFoundError: If no row was deleted
    """
    supabase = get_supabase()
    result = (
        supabase.table(_table(kind))
        .delete()
        .eq("id", str(record_id))
        .eq(OWNER_FIELD, owner)
        .execute()
    )
    if not result.data:
        raise RecordNotFoundError(resolve_kind(kind).value, str(record_id))
    log_with_context(
        logger,
        logging.DEBUG,
        "Deleted record",
        owner=owner,
        entity_kind=resolve_kind(kind),
        record_id=str(record_id),
    )
