"""Pydantic models for lead submission and lead management."""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field

from ...storage.models import Lead, VisitContext
from .page import FormFieldSchema


class Attribution(BaseModel):
    source: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    referrer: Optional[str] = None

    def to_context(self) -> VisitContext:
        return VisitContext(
            source=self.source,
            utm_source=self.utm_source,
            utm_medium=self.utm_medium,
            utm_campaign=self.utm_campaign,
            referrer=self.referrer,
        )


class SubmissionRequest(BaseModel):
    values: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw visitor input keyed by form field id",
    )
    attribution: Attribution = Attribution()


class SubmissionResponse(BaseModel):
    success: bool
    lead_id: Optional[str] = None
    message: str


class LeadResponse(BaseModel):
    id: str
    landing_page_id: str
    landing_page_title: Optional[str] = None
    form_fields: List[FormFieldSchema]
    form_data: Dict[str, Any]
    status: str
    source: str
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    referrer: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_lead(cls, lead: Lead) -> "LeadResponse":
        return cls(
            id=lead.id,
            landing_page_id=lead.landing_page_id,
            landing_page_title=lead.landing_page_title,
            form_fields=[FormFieldSchema.from_field(f) for f in lead.form_fields],
            form_data=lead.form_data,
            status=lead.status.value,
            source=lead.source,
            utm_source=lead.utm_source,
            utm_medium=lead.utm_medium,
            utm_campaign=lead.utm_campaign,
            referrer=lead.referrer,
            created_at=lead.created_at,
            updated_at=lead.updated_at,
        )


class LeadListResponse(BaseModel):
    leads: List[LeadResponse]
    count: int


class LeadStatusUpdate(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str
    field: Optional[str] = None
