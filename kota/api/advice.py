"""Advice API: LLM guidance on a single task or bill."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from kota.chains.record_advice import ADVISABLE_KINDS, advise_on_record
from kota.core.auth_middleware import AuthContext, require_auth
from kota.core.exceptions import RecordNotFoundError, UnknownEntityKindError
from kota.core.schemas_assistant import AdviceResponse
from kota.db.entities import get_record, resolve_kind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/advice")


@router.post("/{kind}/{record_id}", response_model=AdviceResponse)
async def get_advice(
    kind: str, record_id: str, auth: AuthContext = Depends(require_auth)
) -> AdviceResponse:
    """Generate advice for one of the owner's tasks or bills."""
    try:
        entity_kind = resolve_kind(kind)
    except UnknownEntityKindError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    if entity_kind not in ADVISABLE_KINDS:
        raise HTTPException(status_code=400, detail=f"No advice available for {entity_kind.value}")

    try:
        record = get_record(entity_kind, auth.owner, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    try:
        advice = await advise_on_record(entity_kind, record, owner=auth.owner)
    except Exception as e:
        logger.exception(f"Advice generation failed for {entity_kind.value} {record_id}")
        raise HTTPException(status_code=502, detail="Advice generation failed") from e
    return AdviceResponse(advice=advice)
