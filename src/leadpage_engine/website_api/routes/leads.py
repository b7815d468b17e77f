"""Owner routes for the lead list and lead status."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...storage.models import LeadFilters, LeadStatus
from ..middleware.auth import current_user
from ..schemas.lead import LeadListResponse, LeadResponse, LeadStatusUpdate
from ..services.leads import LeadService
from ..services.pages import get_store

router = APIRouter(prefix="/v1/leads", tags=["leads"])

VALID_STATUSES = [s.value for s in LeadStatus]


def _lead_not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": "Lead not found"},
    )


def _invalid_status() -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "success": False,
            "error": "validation_error",
            "detail": f"Invalid status. Must be one of: {VALID_STATUSES}",
        },
    )


def get_lead_service(user_id: str = Depends(current_user), store=Depends(get_store)) -> LeadService:
    return LeadService(store, user_id)


@router.get("", response_model=LeadListResponse)
async def list_leads(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    landing_page_id: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: LeadService = Depends(get_lead_service),
):
    """List leads with filtering."""
    if status and status not in VALID_STATUSES:
        raise _invalid_status()

    filters = LeadFilters(
        start_date=start_date,
        end_date=end_date,
        landing_page_id=landing_page_id,
        status=LeadStatus(status) if status else None,
        search=search.strip() if search and search.strip() else None,
        limit=limit,
        offset=offset,
    )
    leads = service.list_leads(filters)
    return LeadListResponse(leads=[LeadResponse.from_lead(lead) for lead in leads], count=len(leads))


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(lead_id: str, service: LeadService = Depends(get_lead_service)):
    lead = service.get_lead(lead_id)
    if lead is None:
        raise _lead_not_found()
    return LeadResponse.from_lead(lead)


@router.patch("/{lead_id}/status", response_model=LeadResponse)
async def update_status(
    lead_id: str,
    payload: LeadStatusUpdate,
    service: LeadService = Depends(get_lead_service),
):
    """Update lead status."""
    if payload.status not in VALID_STATUSES:
        raise _invalid_status()
    lead = service.update_status(lead_id, LeadStatus(payload.status))
    if lead is None:
        raise _lead_not_found()
    return LeadResponse.from_lead(lead)
