"""Entity API: owner-scoped CRUD over every entity kind."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from kota.core.auth_middleware import AuthContext, require_auth
from kota.core.exceptions import RecordNotFoundError, UnknownEntityKindError
from kota.core.schemas_entities import RECORD_SCHEMAS, EntityKind
from kota.db.entities import (
    create_record,
    delete_record,
    get_record,
    list_records,
    resolve_kind,
    update_record,
)

router = APIRouter(prefix="/entities")


def _kind_or_404(kind: str) -> EntityKind:
    try:
        return resolve_kind(kind)
    except UnknownEntityKindError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _validated(kind: EntityKind, data: dict[str, Any]) -> dict[str, Any]:
    """Apply the kind's record schema (defaults, choice coercion) to a payload."""
    schema = RECORD_SCHEMAS.get(kind)
    if schema is None:
        return data
    try:
        return schema.model_validate(data).model_dump(mode="json")
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise HTTPException(status_code=400, detail=errors) from e


@router.get("/{kind}")
async def list_entities(
    kind: str,
    order_by: Optional[str] = "-created_at",
    limit: Optional[int] = None,
    auth: AuthContext = Depends(require_auth),
) -> list[dict]:
    """List the owner's records of a kind."""
    return list_records(_kind_or_404(kind), auth.owner, order_by=order_by, limit=limit)


@router.post("/{kind}", status_code=201)
async def create_entity(
    kind: str,
    data: dict[str, Any] = Body(...),
    auth: AuthContext = Depends(require_auth),
) -> dict:
    """Create a record of a kind."""
    entity_kind = _kind_or_404(kind)
    try:
        return create_record(entity_kind, auth.owner, _validated(entity_kind, data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/{kind}/{record_id}")
async def get_entity(kind: str, record_id: str, auth: AuthContext = Depends(require_auth)) -> dict:
    """Get one record."""
    try:
        return get_record(_kind_or_404(kind), auth.owner, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.patch("/{kind}/{record_id}")
async def update_entity(
    kind: str,
    record_id: str,
    data: dict[str, Any] = Body(...),
    auth: AuthContext = Depends(require_auth),
) -> dict:
    """Update fields on one record.

    The patch is validated against the stored record merged with the new
    values; only the patched fields are written.
    """
    entity_kind = _kind_or_404(kind)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        current = get_record(entity_kind, auth.owner, record_id)
        merged = _validated(entity_kind, {**current, **data})
        return update_record(
            entity_kind, auth.owner, record_id, {k: merged.get(k) for k in data}
        )
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/{kind}/{record_id}")
async def delete_entity(kind: str, record_id: str, auth: AuthContext = Depends(require_auth)):
    """Delete one record."""
    try:
        delete_record(_kind_or_404(kind), auth.owner, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {"ok": True}
