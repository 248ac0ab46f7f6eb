"""Email draft API: LLM-written bodies and sending via Resend."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from kota.chains.draft_email import draft_email_body
from kota.core.auth_middleware import AuthContext, require_auth
from kota.core.exceptions import EmailDeliveryError, RecordNotFoundError
from kota.core.schemas_assistant import DraftGenerateRequest, DraftGenerateResponse
from kota.services.email_drafts import send_email_draft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email-drafts")


@router.post("/generate", response_model=DraftGenerateResponse)
async def generate_draft(
    request: DraftGenerateRequest, auth: AuthContext = Depends(require_auth)
) -> DraftGenerateResponse:
    """Write or improve an email body for a subject line."""
    try:
        body = await draft_email_body(
            request.subject, request.tone, request.current_body, owner=auth.owner
        )
    except Exception as e:
        logger.exception("Email draft generation failed")
        raise HTTPException(status_code=502, detail="Draft generation failed") from e
    return DraftGenerateResponse(body=body)


@router.post("/{draft_id}/send")
async def send_draft(draft_id: str, auth: AuthContext = Depends(require_auth)) -> dict:
    """Send a saved draft and mark it sent."""
    try:
        return await send_email_draft(auth.owner, draft_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except EmailDeliveryError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
