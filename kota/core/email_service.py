"""Outbound email via the Resend API."""

import html
import logging
from typing import Any

import httpx

from kota.core.config import get_settings
from kota.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


def _text_to_html(text: str) -> str:
    paragraphs = [p for p in text.split("\n\n") if p.strip()]
    return "".join(
        f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs
    )


async def send_email(
    to: str | list[str],
    subject: str,
    body: str,
    from_name: str | None = None,
) -> dict[str, Any]:
    """
    Send a plain-text email (with an HTML rendering) through Resend.

    Args:
        to: Single email or list of emails
        subject: Email subject
        body: Plain text body
        from_name: Sender display name override

    Returns:
        {"message_id": ..., "status": "sent"}

    Raises:
        EmailDeliveryError: If Resend is not configured or rejects the request
    """
    settings = get_settings()
    if not settings.RESEND_API_KEY:
        raise EmailDeliveryError("RESEND_API_KEY not configured")

    to_emails = [to] if isinstance(to, str) else list(to)
    payload: dict[str, Any] = {
        "from": f"{from_name or settings.RESEND_FROM_NAME} <{settings.RESEND_FROM_EMAIL}>",
        "to": to_emails,
        "subject": subject,
        "text": body,
        "html": _text_to_html(body),
    }

    try:
        async with httpx.AsyncClient(timeout=15) as client:
            response = await client.post(
                RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {settings.RESEND_API_KEY}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise EmailDeliveryError(f"Resend request failed: {e}") from e

    message_id = response.json().get("id", "")
    logger.info(
        f"Resend email sent to {len(to_emails)} recipients, "
        f"subject='{subject}', message_id={message_id}"
    )
    return {"message_id": message_id, "status": "sent"}
