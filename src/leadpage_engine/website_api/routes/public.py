"""Public landing page routes: page view and form submission.

No identity is required here.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from ...capture.pipeline import LeadCapturePipeline, PageViewState
from ...errors import (
    FieldValidationError,
    PageNotFoundError,
    PageNotPublishedError,
    StorageError,
    SubmissionError,
)
from ..schemas.lead import SubmissionRequest, SubmissionResponse, ErrorResponse
from ..schemas.page import PublicPageContent, PublicPageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/public/pages", tags=["public"])


def get_pipeline(request: Request) -> LeadCapturePipeline:
    return LeadCapturePipeline(
        request.app.state.store,
        atomic_counters=request.app.state.atomic_counters,
    )


def _not_found(page_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": f"Landing page {page_id} not found"},
    )


@router.get("/{page_id}", response_model=PublicPageResponse, responses={404: {"model": ErrorResponse}})
async def view_page(page_id: str, pipeline: LeadCapturePipeline = Depends(get_pipeline)):
    """Load a page for a visitor, counting the visit when it is published."""
    try:
        view = pipeline.view_page(page_id)
    except StorageError:
        logger.exception("Failed to load landing page %s", page_id)
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "server_error", "detail": "Could not load page"},
        )

    if view.state == PageViewState.NOT_FOUND:
        raise _not_found(page_id)
    if view.state == PageViewState.NOT_PUBLISHED:
        return PublicPageResponse(state=view.state.value, accepts_submissions=False)

    return PublicPageResponse(
        state=view.state.value,
        accepts_submissions=True,
        page=PublicPageContent.from_page(view.page),
    )


@router.post(
    "/{page_id}/submit",
    response_model=SubmissionResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit(
    page_id: str,
    payload: SubmissionRequest,
    pipeline: LeadCapturePipeline = Depends(get_pipeline),
):
    """Validate a visitor's form and record it as a lead."""
    try:
        lead = pipeline.submit(page_id, payload.values, payload.attribution.to_context())
    except FieldValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "validation_error", "detail": e.message, "field": e.label},
        )
    except PageNotFoundError:
        raise _not_found(page_id)
    except PageNotPublishedError:
        raise HTTPException(
            status_code=409,
            detail={"success": False, "error": "not_published", "detail": "This page is not accepting submissions"},
        )
    except (StorageError, SubmissionError):
        # Logged by the pipeline; a SubmissionError means the lead exists
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "server_error", "detail": "Submission failed"},
        )

    return SubmissionResponse(success=True, lead_id=lead.id, message="Submission received")
