"""API router for v1 endpoints."""

from fastapi import APIRouter

from kota.api import advice, assistant, email_drafts, entities, finance, intents

router = APIRouter()

# Chat and the intent pipeline
router.include_router(assistant.router, tags=["assistant"])
router.include_router(intents.router, tags=["intents"])

# Owner-scoped records
router.include_router(entities.router, tags=["entities"])
router.include_router(finance.router, tags=["finance"])

# Record helpers
router.include_router(advice.router, tags=["advice"])
router.include_router(email_drafts.router, tags=["email_drafts"])
