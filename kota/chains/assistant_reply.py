"""Assistant reply generation for the chat page.

Builds the personalized system context (persona, memories, learned patterns,
tone, clock), decides whether the reply should be grounded with live web
data, and asks the LLM for a short free-text reply.
"""

from __future__ import annotations

import re
from datetime import datetime

from kota.core.clock import readable_datetime
from kota.core.llm import invoke_llm
from kota.core.logging import get_logger

logger = get_logger(__name__)

TONE_GUIDANCE: dict[str, str] = {
    "friendly": "Be warm and supportive. Keep responses concise (2-4 sentences) unless asked for details.",
    "professional": "Be polished and business-like. Get to the point quickly (1-3 sentences).",
    "concise": "Be ultra-brief. One sentence answers. No fluff.",
    "sarcastic": "Be witty but brief. Make it fun but get to the point fast.",
}
DEFAULT_TONE = "friendly"

# Messages asking for live, local or current information
LOCAL_DATA_PATTERNS = [
    r"\b(?:weather|forecast|temperature|rain|snow|sunny|cloudy|storm)\b",
    r"\b(?:traffic|congestion|road|route|directions|drive time)\b",
    r"\b(?:store|shop|restaurant|business|cafe|hours|open|close|closes)\b",
    r"\b(?:nearby|near me|local|in my area|around here)\b",
    r"\b(?:available at|in stock|price at|cost at)\b",
    r"\b(?:news|current|latest|today's|happening)\b",
    r"\b(?:movie times|show times|events|concert)\b",
    r"\b(?:score|game|match|sports)\b",
]
INFORMATIONAL_PATTERN = r"\b(?:what|when|where|how|who|why|is|are|does|do|can|will)\b"
SHOPPING_PATTERN = r"\b(?:shop|shopping|buy|purchase|get)\b"
ACTION_PATTERN = r"\b(?:add|create|schedule)\b"

CAPABILITIES = """You are a conversational assistant first and an action-taking assistant second.

CONVERSATION (default): questions, small talk, advice and casual chat get a natural answer.
Do not create tasks or events unless the user explicitly asks.
For stores, restaurants, doctors and other businesses give full details: hours, phone, address, website.
Everything else stays brief (1-2 sentences).

ACTIONS (only on explicit requests such as "add a task", "remind me", "schedule",
"add to my calendar", "track this bill", "add this subscription"):
- Simple items (tasks, events, subscriptions, bills): confirm briefly, e.g. "Done! Reminder added."
- Complex items (assets, projects): ask short follow-up questions first
  (which property, current value, target date, milestones).

Never create anything when the user is just chatting:
"I need to call mom soon" or "I should go to the gym" only get an acknowledgement.

You have live internet access for weather, traffic, business hours, local events,
news, prices, scores and showtimes."""

ACTION_CONFIRMATION = """When the user asks to add, create, schedule or track anything:
- Extract every detail they gave (title, date, time, amount).
- Confirm in 1-2 sentences using words like "Done!", "Added!", "Scheduled!" or "Created!"."""

SHOPPING_MODE = """SHOPPING MODE:
- Ask which specific item they are shopping for.
- Once they say, find local stores that carry it (with address and hours), current deals and availability."""


def needs_internet_context(message: str) -> bool:
    """Whether the reply should be grounded with live web data."""
    text = message.lower()
    if any(re.search(p, text) for p in LOCAL_DATA_PATTERNS):
        return True
    if is_shopping_query(message):
        return True
    return bool(re.search(INFORMATIONAL_PATTERN, text))


def is_shopping_query(message: str) -> bool:
    text = message.lower()
    return bool(re.search(SHOPPING_PATTERN, text)) and not re.search(ACTION_PATTERN, text)


def build_system_context(
    profile: dict | None,
    memories: list[dict],
    now: datetime,
) -> str:
    """Assemble the assistant's system prompt for one owner."""
    profile = profile or {}
    user_name = profile.get("username") or "there"
    ai_name = profile.get("ai_name")

    if ai_name:
        sections = [
            f"You are {ai_name}, the user's personal AI assistant in their Personal OS. "
            f"The user's name is {user_name}, always address them by their name."
        ]
    else:
        sections = [
            "You are a helpful personal AI assistant in Personal OS. "
            f"The user's name is {user_name}, always address them by their name."
        ]

    if memories:
        memory_lines = "\n".join(f"- {m.get('key')}: {m.get('value')}" for m in memories)
        sections.append(
            "IMPORTANT USER MEMORIES - use these to personalize responses:\n"
            f"{memory_lines}\n"
            "When the user asks about something in these memories, recall it immediately."
        )

    patterns = profile.get("user_patterns") or {}
    if patterns:
        categories = ", ".join(patterns.get("frequent_categories") or []) or "None yet"
        reminder_times = ", ".join(patterns.get("preferred_reminder_times") or []) or "Not set"
        sections.append(
            "Learned user patterns:\n"
            f"- Work style: {patterns.get('work_patterns') or 'Unknown'}\n"
            f"- Communication style: {patterns.get('communication_style') or 'Unknown'}\n"
            f"- Time management: {patterns.get('time_management') or 'Unknown'}\n"
            f"- Frequent categories: {categories}\n"
            f"- Task completion rate: {patterns.get('completion_rate') or 0}%\n"
            f"- Preferred reminder times: {reminder_times}\n"
            "Adapt suggestions to these patterns."
        )

    tone = profile.get("tone_preference") or DEFAULT_TONE
    sections.append(
        f"User's tone preference: {tone}\n{TONE_GUIDANCE.get(tone, TONE_GUIDANCE[DEFAULT_TONE])}"
    )
    sections.append("Keep responses short (1-4 sentences) unless the user asks for more detail.")
    sections.append(
        f"Current date and time: {readable_datetime(now)} ({now.replace(microsecond=0).isoformat()})"
    )
    sections.append(CAPABILITIES)
    return "\n\n".join(sections)


def build_reply_prompt(message: str, history: list[dict]) -> str:
    """User-turn prompt: recent history, the new message, and mode hints."""
    history_text = "\n".join(f"{m['role']}: {m['content']}" for m in history)
    prompt = f"Conversation history:\n{history_text or '(none)'}\n\nUser: {message}\n\n{ACTION_CONFIRMATION}"
    if is_shopping_query(message):
        prompt += f"\n\n{SHOPPING_MODE}"
    return prompt


async def generate_reply(
    message: str,
    history: list[dict],
    profile: dict | None,
    memories: list[dict],
    now: datetime,
    owner: str | None = None,
) -> str:
    """
    Generate the assistant's reply to one user message.

    Args:
        message: The user's message
        history: Recent messages oldest-first as {role, content}
        profile: The owner's profile row, if any
        memories: The owner's memories, most important first
        now: Current time in the user's time zone
        owner: Owner identity for usage logs

    Returns:
        Reply text
    """
    grounded = needs_internet_context(message)
    logger.debug(f"Assistant reply grounded={grounded}")
    return await invoke_llm(
        build_reply_prompt(message, history),
        system=build_system_context(profile, memories, now),
        add_context_from_internet=grounded,
        workflow="assistant_reply",
        owner=owner,
    )
