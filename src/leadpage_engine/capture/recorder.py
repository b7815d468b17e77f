"""Persists validated submissions as leads."""

import logging
from typing import Optional

from ..forms.normalizer import NormalizedSubmission
from ..storage.models import LandingPage, Lead, VisitContext

logger = logging.getLogger(__name__)


class LeadRecorder:
    """Append-only writer of new leads."""

    def __init__(self, store):
        self.store = store

    def record(
        self,
        page: LandingPage,
        submission: NormalizedSubmission,
        context: Optional[VisitContext] = None,
    ) -> Lead:
        """Store a submission against ``page`` with status ``new``.

        The page's current field list is stored alongside the values so the
        lead stays readable after the page is edited. Raises StorageError;
        nothing is written in that case.
        """
        lead = self.store.insert_lead(
            landing_page_id=page.id,
            form_fields=page.form_fields,
            form_data=submission.as_form_data(),
            context=context or VisitContext(),
        )
        logger.info(
            "Recorded lead %s for page %s (source=%s, campaign=%s)",
            lead.id, page.id, lead.source, lead.utm_campaign,
        )
        return lead
