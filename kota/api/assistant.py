"""Assistant API: chat turns and conversation history."""

from fastapi import APIRouter, Depends, HTTPException

from kota.core.auth_middleware import AuthContext, require_auth
from kota.core.logging import get_logger
from kota.core.schemas_assistant import (
    ChatRequest,
    ChatTurnResult,
    ClearHistoryResponse,
    ConversationMessage,
)
from kota.db.conversations import clear_history, list_conversation
from kota.services.assistant import run_chat_turn

logger = get_logger(__name__)

router = APIRouter(prefix="/assistant")


@router.post("/chat", response_model=ChatTurnResult)
async def chat(request: ChatRequest, auth: AuthContext = Depends(require_auth)) -> ChatTurnResult:
    """Send a message to the assistant and act on any intents in it."""
    try:
        return await run_chat_turn(auth.owner, request.message)
    except Exception as e:
        logger.exception("Chat turn failed", extra={"owner": auth.owner})
        raise HTTPException(status_code=500, detail="Assistant failed to respond") from e


@router.get("/conversations", response_model=list[ConversationMessage])
async def list_conversations(limit: int = 50, auth: AuthContext = Depends(require_auth)):
    """List conversation history, newest first."""
    return list_conversation(auth.owner, limit=limit)


@router.delete("/conversations", response_model=ClearHistoryResponse)
async def delete_conversations(auth: AuthContext = Depends(require_auth)) -> ClearHistoryResponse:
    """Clear the owner's conversation history."""
    return ClearHistoryResponse(removed=clear_history(auth.owner))
