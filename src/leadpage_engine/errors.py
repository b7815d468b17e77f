"""Exceptions raised by the capture pipeline and storage layer."""

from typing import Optional


class LeadPageError(Exception):
    """Base class for all engine errors."""


class SchemaError(LeadPageError):
    """A page's field schema is malformed."""


class FieldValidationError(LeadPageError):
    """A submitted value failed its field's validation rule."""

    def __init__(self, field_id: str, label: str, message: str):
        self.field_id = field_id
        self.label = label
        self.message = message
        super().__init__(message)


class StorageError(LeadPageError):
    """The database could not complete a read or write."""


class PageNotFoundError(LeadPageError):
    """The page id does not resolve."""

    def __init__(self, page_id: str):
        self.page_id = page_id
        super().__init__(f"Landing page {page_id} not found")


class PageNotPublishedError(LeadPageError):
    """The page exists but is still a draft."""

    def __init__(self, page_id: str):
        self.page_id = page_id
        super().__init__(f"Landing page {page_id} is not published")


class CounterUpdateError(LeadPageError):
    """Page counters could not be written."""


class SubmissionError(LeadPageError):
    """The lead was stored but the follow-up counter update failed."""

    def __init__(self, message: str, lead_id: Optional[str] = None):
        self.lead_id = lead_id
        super().__init__(message)
