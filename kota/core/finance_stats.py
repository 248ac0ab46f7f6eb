"""Summary numbers for the bills and subscriptions pages."""

from datetime import date, timedelta

from pydantic import BaseModel

from kota.core.clock import parse_date

# Multipliers converting one billing interval to a monthly amount
MONTHLY_FACTORS: dict[str, float] = {
    "weekly": 52 / 12,
    "monthly": 1.0,
    "quarterly": 1 / 3,
    "yearly": 1 / 12,
}


class AmountBucket(BaseModel):
    count: int = 0
    amount: float = 0.0


class BillStats(BaseModel):
    overdue: AmountBucket
    due_this_week: AmountBucket
    upcoming: AmountBucket
    paid: AmountBucket


class SubscriptionStats(BaseModel):
    active_count: int
    monthly_cost: float
    annual_cost: float
    next_renewal: date | None = None


def _bucket(rows: list[dict]) -> AmountBucket:
    return AmountBucket(
        count=len(rows),
        amount=round(sum(float(r.get("amount") or 0) for r in rows), 2),
    )


def bill_stats(bills: list[dict], today: date) -> BillStats:
    """
    Group bills the way the bills page shows them.

    Pending bills due today or earlier are overdue. Pending bills due after
    today are upcoming, and those due within the next seven days are also
    due this week.
    """
    pending = [b for b in bills if b.get("status") == "pending"]
    overdue, upcoming, this_week = [], [], []
    week_end = today + timedelta(days=7)
    for bill in pending:
        due = parse_date(bill.get("due_date"))
        if due is None:
            continue
        if due <= today:
            overdue.append(bill)
        else:
            upcoming.append(bill)
            if due < week_end:
                this_week.append(bill)

    paid = [b for b in bills if b.get("status") == "paid"]
    return BillStats(
        overdue=_bucket(overdue),
        due_this_week=_bucket(this_week),
        upcoming=_bucket(upcoming),
        paid=_bucket(paid),
    )


def subscription_stats(subscriptions: list[dict]) -> SubscriptionStats:
    """Monthly and annual cost of active subscriptions, and the next renewal."""
    active = [s for s in subscriptions if s.get("status") == "active"]
    monthly = sum(
        float(s.get("amount") or 0) * MONTHLY_FACTORS.get(s.get("interval") or "monthly", 1.0)
        for s in active
    )
    renewals = [d for d in (parse_date(s.get("next_renewal")) for s in active) if d]
    return SubscriptionStats(
        active_count=len(active),
        monthly_cost=round(monthly, 2),
        annual_cost=round(monthly * 12, 2),
        next_renewal=min(renewals) if renewals else None,
    )
