"""Finance API: bill and subscription summaries."""

from fastapi import APIRouter, Depends

from kota.core.auth_middleware import AuthContext, require_auth
from kota.core.clock import user_today
from kota.core.finance_stats import BillStats, SubscriptionStats, bill_stats, subscription_stats
from kota.core.schemas_entities import EntityKind
from kota.db.entities import list_records

router = APIRouter(prefix="/finance")


@router.get("/bills/stats", response_model=BillStats)
async def get_bill_stats(auth: AuthContext = Depends(require_auth)) -> BillStats:
    """Overdue, due-this-week, upcoming and paid totals."""
    return bill_stats(list_records(EntityKind.BILL, auth.owner), user_today())


@router.get("/subscriptions/stats", response_model=SubscriptionStats)
async def get_subscription_stats(auth: AuthContext = Depends(require_auth)) -> SubscriptionStats:
    """Active count, monthly and annual cost, next renewal."""
    return subscription_stats(list_records(EntityKind.SUBSCRIPTION, auth.owner))
