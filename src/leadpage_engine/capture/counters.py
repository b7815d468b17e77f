"""Visit and conversion counters on landing pages."""

import logging
from typing import Optional

from ..errors import CounterUpdateError, StorageError
from ..storage.models import LandingPage, compute_conversion_rate

logger = logging.getLogger(__name__)

__all__ = ["PageCounterUpdater", "compute_conversion_rate"]


class PageCounterUpdater:
    """Increments page counters after visits and conversions.

    By default both paths read the current value and write it back plus
    one, with no compare-and-swap: two concurrent requests can read the same
    value and one increment is lost. With ``atomic=True`` the storage layer
    performs the increment under its own write lock instead.
    """

    def __init__(self, store, atomic: bool = False):
        self.store = store
        self.atomic = atomic

    def record_visit(self, page: LandingPage) -> Optional[int]:
        """Count a public load of ``page``.

        ``page`` is the copy the caller just read. Failures are logged and
        swallowed so the page still renders; returns the new visit count or
        None when the write failed.
        """
        try:
            if self.atomic:
                updated = self.store.increment_page_counters(page.id, visits=1)
                return updated.visits

            new_visits = (page.visits or 0) + 1
            self.store.update_page_counters(page.id, visits=new_visits)
            return new_visits
        except StorageError as e:
            logger.warning("Could not increment visits for page %s: %s", page.id, e)
            return None

    def record_conversion(self, page_id: str) -> LandingPage:
        """Count a successful submission and recompute the conversion rate."""
        try:
            if self.atomic:
                return self.store.increment_page_counters(page_id, conversions=1)

            page = self.store.get_page(page_id)
            if page is None:
                raise CounterUpdateError(f"Landing page {page_id} disappeared before its counters were updated")

            new_conversions = (page.conversions or 0) + 1
            rate = compute_conversion_rate(new_conversions, page.visits or 0)
            self.store.update_page_counters(
                page_id, conversions=new_conversions, conversion_rate=rate
            )
            page.conversions = new_conversions
            page.conversion_rate = rate
            return page
        except StorageError as e:
            logger.error("Could not update conversion counters for page %s: %s", page_id, e)
            raise CounterUpdateError(str(e)) from e
