"""Prompt templates and JSON schemas for intent field extraction.

One template and one schema per extraction. Templates are plain str.format
strings; literal braces are doubled.
"""

from typing import Any

from kota.core.schemas_entities import (
    AssetCategory,
    BillCategory,
    EntityKind,
    LearningDifficulty,
    SubscriptionCategory,
    SubscriptionInterval,
    TaskPriority,
)
from kota.core.schemas_intents import DELETABLE_KINDS

EXTRACTION_SYSTEM = """You extract structured records from a personal assistant chat.
Always answer by calling the submit_result tool.
When the message does not describe the requested record, submit the required field as null.
Never invent names, amounts or dates the user did not give unless the instructions say to default them."""


def _nullable(type_: str, **extra: Any) -> dict[str, Any]:
    return {"type": [type_, "null"], **extra}


def _choices(enum_cls) -> list[str]:
    return [m.value for m in enum_cls]


def _object(**properties: dict[str, Any]) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


# ============================================================================
# Deletion and move
# ============================================================================

DELETION_SCHEMA = _object(
    entity=_nullable("string", enum=[k.value for k in DELETABLE_KINDS] + [None]),
    item_name=_nullable("string"),
)

DELETION_PROMPT = """The user wants to delete or remove something:
"{message}"

Identify what should be deleted and which kind of record it is.
Supported kinds: {kinds}.

- entity: the record kind, one of the supported kinds
- item_name: the name, title or vendor of the record (e.g. "Hulu", "Doctor Appointment"). Be as specific as the user was.

If this is not a clear request to delete one specific item, submit entity as null."""

MOVE_SCHEMA = _object(
    item_name=_nullable("string"),
    from_entity=_nullable("string"),
    to_entity=_nullable("string"),
    amount=_nullable("number"),
    interval=_nullable("string"),
)

MOVE_PROMPT = """The user may want to move an item from one category to another:
"{message}"

Examples:
- "remove Hulu from bills and add to subscriptions"
- "move the gym membership from bills to subscriptions"

- item_name: the item being moved (required)
- from_entity: the source record kind, e.g. "bill" (required)
- to_entity: the destination record kind, e.g. "subscription" (required)
- amount: dollar amount if mentioned
- interval: billing interval if moving to a subscription ("monthly", "yearly", ...)

If this is not a clear move request, submit item_name as null."""


# ============================================================================
# Creation
# ============================================================================

TASK_SCHEMA = _object(
    title=_nullable("string"),
    notes=_nullable("string"),
    priority=_nullable("string", enum=_choices(TaskPriority) + [None]),
    due_date=_nullable("string"),
)

TASK_PROMPT = """CURRENT DATE/TIME: {current_datetime} ({timezone})

RECENT CONVERSATION:
{context}

USER MESSAGE: "{message}"

Extract the task, to-do or reminder the user asked for. Be liberal.
Use the conversation to resolve references like "this", "that" or "it":
if the conversation mentions "Sakura Sushi & Grill" and the user says
"remind me to get an order of this", the title is "Order from Sakura Sushi & Grill".

- title: the action with full context, pronouns resolved (required)
- notes: relevant details from the conversation
- priority: low, medium, high or urgent
- due_date: ISO datetime if a time is given, computed from the current date above

"remind me to call John" -> {{"title": "Call John", "due_date": null}}

A meeting or appointment at a scheduled time is an event, not a task: submit title as null."""

EVENT_SCHEMA = _object(
    title=_nullable("string"),
    description=_nullable("string"),
    start_date=_nullable("string"),
    end_date=_nullable("string"),
    location=_nullable("string"),
    all_day=_nullable("boolean"),
)

EVENT_PROMPT = """CURRENT DATE/TIME: {current_datetime} ({timezone}). This is the only date reference.

RECENT CONVERSATION:
{context}

USER MESSAGE: "{message}"

Extract the calendar event. Date rules:
1. Take dates exactly as stated. No time zone conversion.
2. "January 5th 2027" -> "2027-01-05T00:00:00".
3. Relative dates ("tomorrow", "next Friday") are computed from the current date above.
4. A stated time uses 24-hour format ("2pm" -> 14:00:00).
5. No time given -> 00:00:00 and all_day true.
6. Return local times as YYYY-MM-DDTHH:mm:ss with no "Z" or offset.

- title: event title with full context
- description: details
- start_date: local ISO datetime
- end_date: local ISO datetime, start plus one hour when not stated
- location: if mentioned
- all_day: true when no specific time was given

If this is not an event or appointment, submit title as null."""

PROJECT_SCHEMA = _object(
    name=_nullable("string"),
    description=_nullable("string"),
    start_date=_nullable("string"),
    target_date=_nullable("string"),
)

PROJECT_PROMPT = """CURRENT DATE: {current_date}

USER MESSAGE: "{message}"

Extract the project the user wants to create or track. Be liberal: "create project",
"new project" and "start project" all count.

- name: project name (required)
- description: project details
- start_date: ISO date, today when not stated
- target_date: ISO date if mentioned

"new project for marketing campaign" -> {{"name": "Marketing Campaign", "start_date": "{current_date}"}}

If this is definitely not a project, submit name as null."""

CONTACT_SCHEMA = _object(
    name=_nullable("string"),
    email=_nullable("string"),
    phone=_nullable("string"),
    company=_nullable("string"),
    notes=_nullable("string"),
)

CONTACT_PROMPT = """USER MESSAGE: "{message}"

Extract the contact the user wants saved.

- name: contact name (required)
- email, phone, company: if mentioned
- notes: anything else worth keeping

If this is not a contact request, submit name as null."""

BILL_SCHEMA = _object(
    name=_nullable("string"),
    amount=_nullable("number"),
    due_date=_nullable("string"),
    category=_nullable("string", enum=_choices(BillCategory) + [None]),
    recurring=_nullable("boolean"),
    notes=_nullable("string"),
)

BILL_PROMPT = """CURRENT DATE: {current_date}

USER MESSAGE: "{message}"

Extract the bill the user wants to track. Be liberal: "add bill", "track bill" and
"new bill" all count.

- name: the biller or service (required)
- amount: amount as a number, 0 when not given
- due_date: ISO date computed from the current date; leave null when not stated
- category: one of {categories}
- recurring: true when it repeats
- notes: anything else

"add electricity bill $150" -> {{"name": "Electricity", "amount": 150}}

If this is definitely not a bill, submit name as null."""

SUBSCRIPTION_SCHEMA = _object(
    vendor=_nullable("string"),
    amount=_nullable("number"),
    interval=_nullable("string", enum=_choices(SubscriptionInterval) + [None]),
    category=_nullable("string", enum=_choices(SubscriptionCategory) + [None]),
    next_renewal=_nullable("string"),
)

SUBSCRIPTION_PROMPT = """CURRENT DATE: {current_date}

USER MESSAGE: "{message}"

Extract the subscription. Any named service the user wants tracked counts.

- vendor: service name (required, e.g. "Hulu", "Adobe Creative Cloud")
- amount: cost per interval as a number; estimate the typical price when not given, or use 0
- interval: one of {intervals} (default monthly)
- category: one of {categories}
- next_renewal: ISO date of the next payment, the 1st of next month when not stated

"track netflix subscription" -> {{"vendor": "Netflix", "amount": 15, "interval": "monthly", "category": "streaming"}}

If this is definitely not a subscription, submit vendor as null."""

LEARNING_SCHEMA = _object(
    subject=_nullable("string"),
    goal=_nullable("string"),
    difficulty=_nullable("string", enum=_choices(LearningDifficulty) + [None]),
    notes=_nullable("string"),
)

LEARNING_PROMPT = """USER MESSAGE: "{message}"

Extract what the user wants to learn.

- subject: subject to learn (required, e.g. "Spanish", "Python")
- goal: the learning goal
- difficulty: beginner, intermediate or advanced
- notes: anything else

If this is not a learning request, submit subject as null."""

ASSET_SCHEMA = _object(
    name=_nullable("string"),
    category=_nullable("string", enum=_choices(AssetCategory) + [None]),
    brand=_nullable("string"),
    purchase_price=_nullable("number"),
    current_value=_nullable("number"),
    purchase_date=_nullable("string"),
    property_name=_nullable("string"),
    notes=_nullable("string"),
)

ASSET_PROMPT = """USER MESSAGE: "{message}"

Extract the asset the user owns or bought. Be liberal: "add asset", "track asset"
and "bought" all count.

Available properties: {properties}

- name: what they own or bought (required)
- category: one of {categories}
- brand: if mentioned
- purchase_price: number if mentioned
- current_value: number if mentioned
- purchase_date: ISO date if mentioned
- property_name: which property it belongs to; must be one of the available properties, otherwise null
- notes: anything else

"add new laptop to assets" -> {{"name": "Laptop", "category": "electronics"}}

If this is definitely not an asset, submit name as null."""

MEMORY_SCHEMA = _object(
    key=_nullable("string"),
    value=_nullable("string"),
    importance=_nullable("integer", minimum=1, maximum=5),
)

MEMORY_PROMPT = """Read this exchange and extract one personal fact about the user worth remembering long-term.

USER: "{message}"
ASSISTANT: "{assistant_reply}"

Personal facts include name, location, family members, pets, job, hobbies,
preferences, important dates, goals, home details and health information.

- key: short identifier ("name", "location", "dog_name", "occupation")
- value: the information, specific ("Panama City, Florida" rather than "Florida")
- importance: 1-5 (5 for name or location, 3 moderate, 1 minor preference)

"I live in Panama City Florida" -> {{"key": "location", "value": "Panama City, Florida", "importance": 5}}
"My dog's name is Max" -> {{"key": "dog_name", "value": "Max", "importance": 3}}

If no personal information is shared, submit key as null."""


CREATION_PROMPTS: dict[EntityKind, tuple[str, dict[str, Any]]] = {
    EntityKind.TASK: (TASK_PROMPT, TASK_SCHEMA),
    EntityKind.EVENT: (EVENT_PROMPT, EVENT_SCHEMA),
    EntityKind.PROJECT: (PROJECT_PROMPT, PROJECT_SCHEMA),
    EntityKind.CONTACT: (CONTACT_PROMPT, CONTACT_SCHEMA),
    EntityKind.BILL: (BILL_PROMPT, BILL_SCHEMA),
    EntityKind.SUBSCRIPTION: (SUBSCRIPTION_PROMPT, SUBSCRIPTION_SCHEMA),
    EntityKind.LEARNING: (LEARNING_PROMPT, LEARNING_SCHEMA),
    EntityKind.ASSET: (ASSET_PROMPT, ASSET_SCHEMA),
    EntityKind.MEMORY: (MEMORY_PROMPT, MEMORY_SCHEMA),
}

# Extra template values per kind
PROMPT_CHOICES: dict[EntityKind, dict[str, str]] = {
    EntityKind.BILL: {"categories": ", ".join(_choices(BillCategory))},
    EntityKind.SUBSCRIPTION: {
        "intervals": ", ".join(_choices(SubscriptionInterval)),
        "categories": ", ".join(_choices(SubscriptionCategory)),
    },
    EntityKind.ASSET: {"categories": ", ".join(_choices(AssetCategory))},
}

DELETION_KINDS_TEXT = ", ".join(k.value for k in DELETABLE_KINDS)
