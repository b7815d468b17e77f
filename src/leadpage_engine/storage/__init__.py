"""Storage layer for landing pages and leads."""

from .database import PageDatabase
from .models import LandingPage, Lead, LeadFilters, LeadStatus, PageStatus, VisitContext

__all__ = [
    "PageDatabase",
    "LandingPage",
    "Lead",
    "LeadFilters",
    "LeadStatus",
    "PageStatus",
    "VisitContext",
]
