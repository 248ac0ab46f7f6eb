"""LLM-written email bodies for the drafts page."""

from kota.core.llm import invoke_llm

EMAIL_DRAFT_PROMPT = """Write a {tone} email with the subject: "{subject}"

{body_instruction}

Make it clear and ready to send. Include an appropriate greeting and closing.
Return only the email body."""


def build_draft_prompt(subject: str, tone: str = "professional", current_body: str = "") -> str:
    if current_body.strip():
        body_instruction = f"Current draft:\n{current_body}\n\nImprove and expand this draft."
    else:
        body_instruction = "Create a complete email body."
    return EMAIL_DRAFT_PROMPT.format(
        tone=tone or "professional",
        subject=subject,
        body_instruction=body_instruction,
    )


async def draft_email_body(
    subject: str,
    tone: str = "professional",
    current_body: str = "",
    owner: str | None = None,
) -> str:
    """Write (or improve) an email body for a subject line."""
    return await invoke_llm(
        build_draft_prompt(subject, tone, current_body),
        workflow="email_draft",
        owner=owner,
    )
