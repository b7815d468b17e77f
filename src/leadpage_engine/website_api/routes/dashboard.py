"""Dashboard analytics route."""

from fastapi import APIRouter, Depends, Query

from ...analytics.aggregator import DashboardAggregator
from ..middleware.auth import current_user
from ..services.pages import get_store

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"])


@router.get("")
async def dashboard(
    days: int = Query(default=7, ge=1, le=90),
    user_id: str = Depends(current_user),
    store=Depends(get_store),
):
    """Totals, per-day series and top pages for the signed-in owner."""
    return DashboardAggregator(store, days=days).dashboard(user_id)
