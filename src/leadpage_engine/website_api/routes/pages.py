"""Owner routes for building and publishing landing pages."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...errors import SchemaError
from ...storage.models import LeadFilters, LeadStatus, PageStatus
from ..middleware.auth import current_user
from ..schemas.lead import LeadListResponse, LeadResponse
from ..schemas.page import PageCreateRequest, PageResponse, PageUpdateRequest
from ..services.leads import LeadService
from ..services.pages import PageService, get_store, share_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/pages", tags=["pages"])


def get_page_service(user_id: str = Depends(current_user), store=Depends(get_store)) -> PageService:
    return PageService(store, user_id)


def _page_not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": "Landing page not found"},
    )


def _schema_error(e: SchemaError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"success": False, "error": "schema_error", "detail": str(e)},
    )


def _response(page) -> PageResponse:
    return PageResponse.from_page(page, share_url=share_url(page.id))


@router.get("", response_model=List[PageResponse])
async def list_pages(service: PageService = Depends(get_page_service)):
    return [_response(p) for p in service.list_pages()]


@router.post("", response_model=PageResponse, status_code=201)
async def create_page(payload: PageCreateRequest, service: PageService = Depends(get_page_service)):
    """Create a draft page."""
    content = payload.model_dump(exclude={"title", "form_fields"})
    try:
        page = service.create_page(
            title=payload.title,
            form_fields=[f.to_field() for f in payload.form_fields],
            **content,
        )
    except SchemaError as e:
        raise _schema_error(e)
    return _response(page)


@router.get("/{page_id}", response_model=PageResponse)
async def get_page(page_id: str, service: PageService = Depends(get_page_service)):
    """Owner view of a page. Does not count as a visit."""
    page = service.get_owned(page_id)
    if page is None:
        raise _page_not_found()
    return _response(page)


@router.patch("/{page_id}", response_model=PageResponse)
async def update_page(
    page_id: str,
    payload: PageUpdateRequest,
    service: PageService = Depends(get_page_service),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"form_fields"})
    changes = {k: v for k, v in changes.items() if v is not None}
    if payload.form_fields is not None:
        changes["form_fields"] = [f.to_field() for f in payload.form_fields]

    try:
        page = service.update_page(page_id, changes)
    except SchemaError as e:
        raise _schema_error(e)
    if page is None:
        raise _page_not_found()
    return _response(page)


@router.post("/{page_id}/publish", response_model=PageResponse)
async def publish_page(page_id: str, service: PageService = Depends(get_page_service)):
    page = service.set_status(page_id, PageStatus.PUBLISHED)
    if page is None:
        raise _page_not_found()
    return _response(page)


@router.post("/{page_id}/unpublish", response_model=PageResponse)
async def unpublish_page(page_id: str, service: PageService = Depends(get_page_service)):
    page = service.set_status(page_id, PageStatus.DRAFT)
    if page is None:
        raise _page_not_found()
    return _response(page)


@router.delete("/{page_id}")
async def delete_page(page_id: str, service: PageService = Depends(get_page_service)):
    """Delete a page together with its leads."""
    if not service.delete_page(page_id):
        raise _page_not_found()
    return {"success": True}


@router.get("/{page_id}/leads", response_model=LeadListResponse)
async def page_leads(
    page_id: str,
    status: Optional[LeadStatus] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: PageService = Depends(get_page_service),
):
    """Submissions received by one page, newest first."""
    if service.get_owned(page_id) is None:
        raise _page_not_found()
    leads = LeadService(service.store, service.user_id).list_leads(
        LeadFilters(landing_page_id=page_id, status=status, limit=limit, offset=offset)
    )
    return LeadListResponse(leads=[LeadResponse.from_lead(lead) for lead in leads], count=len(leads))
