"""Pydantic schemas for the assistant chat, advice and email draft endpoints."""

from pydantic import BaseModel, Field

from kota.core.schemas_intents import IntentProposal


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ChatTurnResult(BaseModel):
    """Reply to one user message plus whatever the intent pipeline did with it."""
    reply: str
    created_items: list[str] = Field(default_factory=list)
    proposals: list[IntentProposal] = Field(default_factory=list)


class ClearHistoryResponse(BaseModel):
    removed: int


class ConversationMessage(BaseModel):
    id: str | None = None
    role: str
    message: str
    created_at: str | None = None


class AdviceResponse(BaseModel):
    advice: str


class DraftGenerateRequest(BaseModel):
    subject: str = Field(..., min_length=1)
    tone: str = "professional"
    current_body: str = ""


class DraftGenerateResponse(BaseModel):
    body: str
