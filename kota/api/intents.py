"""Intent API: keyword gating and the full extraction pipeline."""

from fastapi import APIRouter, Depends

from kota.chains.intent_detection import detect_intents
from kota.chains.intent_processor import IntentProcessor
from kota.core.auth_middleware import AuthContext, require_auth
from kota.core.schemas_intents import (
    DetectedIntent,
    IntentDetectRequest,
    IntentProcessRequest,
    IntentResult,
)

router = APIRouter(prefix="/intents")


@router.post("/detect", response_model=list[DetectedIntent])
async def detect(request: IntentDetectRequest, auth: AuthContext = Depends(require_auth)):
    """Report which intent gates fire for a message. No LLM calls, no writes."""
    return detect_intents(request.user_message)


@router.post("/process", response_model=IntentResult)
async def process(request: IntentProcessRequest, auth: AuthContext = Depends(require_auth)):
    """Run detection, extraction and (unless dry_run) commits for one chat turn."""
    processor = IntentProcessor(auth.owner, dry_run=request.dry_run)
    return await processor.process_message(
        request.user_message,
        request.assistant_reply,
        request.recent_context,
    )
