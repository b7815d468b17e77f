"""Public lead capture flow: page view, validation, lead, counters.

A submission runs as a chain of independent writes:

1. validate the raw values against the page's fields (no side effects)
2. insert the lead
3. increment the page's conversion counter and recompute its rate

There is no transaction spanning steps 2 and 3. If step 3 fails the lead
stays stored while the counters under-report; the caller gets a
SubmissionError that carries the stored lead id.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import (
    CounterUpdateError,
    PageNotFoundError,
    PageNotPublishedError,
    StorageError,
    SubmissionError,
)
from ..forms.normalizer import normalize_submission
from ..storage.models import LandingPage, Lead, VisitContext
from .counters import PageCounterUpdater
from .recorder import LeadRecorder

logger = logging.getLogger(__name__)


class PageViewState(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    NOT_PUBLISHED = "not_published"


@dataclass
class PageView:
    """Result of loading a page on the public route."""
    state: PageViewState
    page: Optional[LandingPage] = None

    @property
    def accepts_submissions(self) -> bool:
        return self.state == PageViewState.OK


class LeadCapturePipeline:
    """Coordinates the public visit and submission paths for one store."""

    def __init__(self, store, atomic_counters: bool = False):
        self.store = store
        self.counters = PageCounterUpdater(store, atomic=atomic_counters)
        self.recorder = LeadRecorder(store)

    def view_page(self, page_id: str) -> PageView:
        """Load a page for a visitor and count the visit if it is published.

        Missing and draft pages are ordinary outcomes, not errors. A failed
        visit increment is logged and does not affect the result.
        """
        page = self.store.get_page(page_id)
        if page is None:
            return PageView(PageViewState.NOT_FOUND)
        if not page.is_published:
            return PageView(PageViewState.NOT_PUBLISHED, page)

        new_visits = self.counters.record_visit(page)
        if new_visits is not None:
            page.visits = new_visits
        return PageView(PageViewState.OK, page)

    def _load_published(self, page_id: str) -> LandingPage:
        page = self.store.get_page(page_id)
        if page is None:
            raise PageNotFoundError(page_id)
        if not page.is_published:
            raise PageNotPublishedError(page_id)
        return page

    def submit(
        self,
        page_id: str,
        raw_values: Dict[str, Any],
        context: Optional[VisitContext] = None,
    ) -> Lead:
        """Validate and store a visitor's submission.

        Raises FieldValidationError before anything is written,
        PageNotFoundError / PageNotPublishedError for pages that cannot
        accept submissions, StorageError when the lead insert fails, and
        SubmissionError when the lead was stored but the counters were not.
        """
        try:
            page = self._load_published(page_id)
        except StorageError:
            logger.exception("Failed to load landing page %s for submission", page_id)
            raise

        submission = normalize_submission(page.form_fields, raw_values)

        try:
            lead = self.recorder.record(page, submission, context)
        except StorageError:
            logger.exception("Failed to store lead for page %s", page_id)
            raise

        try:
            self.counters.record_conversion(page.id)
        except CounterUpdateError as e:
            logger.error(
                "Lead %s stored but counters for page %s were not updated: %s",
                lead.id, page.id, e,
            )
            raise SubmissionError(
                "Submission could not be completed", lead_id=lead.id
            ) from e

        return lead
