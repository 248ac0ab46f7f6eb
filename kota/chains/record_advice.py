"""On-demand advice for a single task or bill."""

from kota.core.clock import parse_date
from kota.core.llm import invoke_llm
from kota.core.schemas_entities import EntityKind

TASK_ADVICE_PROMPT = """You are a productivity expert helping someone execute this specific task efficiently.

Task details:
- Title: {title}
- Notes: {notes}
- Priority: {priority}
- Due date: {due_date}
- Status: {status}

Give actionable advice on:
1. Break it down: 3-5 concrete action steps
2. Time estimate: realistic time needed and the best time of day to do it
3. Focus strategy: how to avoid distractions
4. Efficiency: shortcuts, tools or methods to finish faster
5. Common pitfalls: what usually goes wrong with this kind of task and how to avoid it

Be specific to this task."""

BILL_ADVICE_PROMPT = """You are a personal finance advisor helping someone manage their bills and budget.

Bill details:
- Name: {name}
- Amount: ${amount}
- Due date: {due_date}
- Category: {category}
- Recurring: {recurring}
- Status: {status}

Give actionable advice on:
1. Payment strategy: timing and method to avoid fees and smooth cash flow
2. Cost reduction: ways to negotiate, reduce or eliminate this expense
3. Debt paydown: if this is debt, snowball or avalanche recommendations
4. Budget integration: how to fit it into a monthly budget
5. Automation: setting up automatic payments so due dates are never missed

Be specific and practical."""

ADVISABLE_KINDS = (EntityKind.TASK, EntityKind.BILL)


def _display_date(value) -> str:
    parsed = parse_date(value)
    return parsed.strftime("%B %-d, %Y") if parsed else "Not set"


def build_advice_prompt(kind: EntityKind, record: dict) -> str:
    """Render the advice prompt for a task or bill row.

    Raises:
        ValueError: For kinds without advice
    """
    if kind == EntityKind.TASK:
        return TASK_ADVICE_PROMPT.format(
            title=record.get("title", ""),
            notes=record.get("notes") or "None",
            priority=record.get("priority") or "medium",
            due_date=_display_date(record.get("due_date")),
            status=record.get("status") or "todo",
        )
    if kind == EntityKind.BILL:
        return BILL_ADVICE_PROMPT.format(
            name=record.get("name", ""),
            amount=record.get("amount") or 0,
            due_date=_display_date(record.get("due_date")),
            category=record.get("category") or "other",
            recurring="Yes" if record.get("recurring") else "No",
            status=record.get("status") or "pending",
        )
    raise ValueError(f"No advice available for {kind.value}")


async def advise_on_record(kind: EntityKind, record: dict, owner: str | None = None) -> str:
    return await invoke_llm(
        build_advice_prompt(kind, record),
        workflow=f"advice_{kind.value}",
        owner=owner,
    )
