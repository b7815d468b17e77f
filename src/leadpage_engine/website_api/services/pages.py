"""Owner-side page management used by the dashboard routes."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request

from ...forms.schema import FormField, validate_field_schema
from ...storage.database import PageDatabase
from ...storage.models import LandingPage, PageStatus
from ..config import settings

logger = logging.getLogger(__name__)


def get_store(request: Request) -> PageDatabase:
    """FastAPI dependency returning the app's database."""
    return request.app.state.store


def share_url(page_id: str) -> str:
    return f"{settings.public_base_url}/landing-pages/{page_id}"


class PageService:
    """Page CRUD restricted to the owning user.

    Pages owned by someone else are reported exactly like missing pages.
    """

    def __init__(self, store: PageDatabase, user_id: str):
        self.store = store
        self.user_id = user_id

    def get_owned(self, page_id: str) -> Optional[LandingPage]:
        page = self.store.get_page(page_id)
        if page is None or page.user_id != self.user_id:
            return None
        return page

    def list_pages(self) -> List[LandingPage]:
        return self.store.list_pages(self.user_id)

    def create_page(self, title: str, form_fields: List[FormField], **content: Any) -> LandingPage:
        validate_field_schema(form_fields)
        return self.store.create_page(
            user_id=self.user_id, title=title, form_fields=form_fields, **content
        )

    def update_page(self, page_id: str, changes: Dict[str, Any]) -> Optional[LandingPage]:
        if self.get_owned(page_id) is None:
            return None
        if "form_fields" in changes:
            validate_field_schema(changes["form_fields"])
        return self.store.update_page(page_id, **changes)

    def set_status(self, page_id: str, status: PageStatus) -> Optional[LandingPage]:
        if self.get_owned(page_id) is None:
            return None
        return self.store.set_page_status(page_id, status)

    def delete_page(self, page_id: str) -> bool:
        if self.get_owned(page_id) is None:
            return False
        return self.store.delete_page(page_id)
