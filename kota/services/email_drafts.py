"""Sending saved email drafts."""

import logging

from kota.core.email_service import send_email
from kota.core.logging import get_logger, log_with_context
from kota.core.schemas_entities import EntityKind
from kota.db.entities import get_record, update_record

logger = get_logger(__name__)

SENDER_NAME = "KOTA OS"


async def send_email_draft(owner: str, draft_id: str) -> dict:
    """
    Send a draft and mark it sent.

    Raises:
        RecordNotFoundError: If the draft does not exist for this owner
        ValueError: If recipient, subject or body is missing
        EmailDeliveryError: If delivery fails
    """
    draft = get_record(EntityKind.EMAIL_DRAFT, owner, draft_id)
    missing = [f for f in ("to", "subject", "body") if not (draft.get(f) or "").strip()]
    if missing:
        raise ValueError(f"Draft is missing {', '.join(missing)}")

    await send_email(draft["to"], draft["subject"], draft["body"], from_name=SENDER_NAME)
    updated = update_record(EntityKind.EMAIL_DRAFT, owner, draft_id, {"status": "sent"})
    log_with_context(
        logger, logging.INFO, "Sent email draft", owner=owner, record_id=draft_id
    )
    return updated
