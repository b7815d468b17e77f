"""Lead service for dashboard API routes."""

from typing import List, Optional

from ...storage.database import PageDatabase
from ...storage.models import Lead, LeadFilters, LeadStatus


class LeadService:
    """Service layer for an owner's lead reads and status changes."""

    def __init__(self, store: PageDatabase, user_id: str):
        self.store = store
        self.user_id = user_id

    def list_leads(self, filters: Optional[LeadFilters] = None) -> List[Lead]:
        return self.store.list_leads(self.user_id, filters)

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        lead = self.store.get_lead(lead_id)
        if lead is None:
            return None
        page = self.store.get_page(lead.landing_page_id)
        if page is None or page.user_id != self.user_id:
            return None
        return lead

    def update_status(self, lead_id: str, status: LeadStatus) -> Optional[Lead]:
        """Change a lead's status; None if the lead is not the owner's."""
        if self.get_lead(lead_id) is None:
            return None
        self.store.update_lead_status(lead_id, status)
        return self.get_lead(lead_id)
