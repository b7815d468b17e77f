"""Data models for landing page and lead storage."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any

from ..forms.schema import FormField


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_conversion_rate(conversions: int, visits: int) -> float:
    """Conversions per visit as a percentage, two decimals.

    Visits are floored at 1 so the rate is always defined.
    """
    return round(conversions / max(visits, 1) * 100, 2)


class PageStatus(Enum):
    """Lifecycle state of a landing page."""

    DRAFT = "draft"
    PUBLISHED = "published"


class LeadStatus(Enum):
    """Status of a lead in the owner's pipeline."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"


DEFAULT_BUTTON_TEXT = "Submit"
DEFAULT_BUTTON_COLOR = "#3182ce"


@dataclass
class LandingPage:
    """A publishable landing page owned by one user."""

    id: str
    user_id: str

    # Content
    title: str = ""
    description: str = ""
    logo_url: str = ""
    background_url: str = ""
    form_fields: List[FormField] = field(default_factory=list)
    custom_html: str = ""
    use_custom_html: bool = False
    button_text: str = DEFAULT_BUTTON_TEXT
    button_color: str = DEFAULT_BUTTON_COLOR

    status: PageStatus = PageStatus.DRAFT

    # Counters
    visits: int = 0
    conversions: int = 0
    conversion_rate: float = 0.0

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_published(self) -> bool:
        return self.status == PageStatus.PUBLISHED


@dataclass
class VisitContext:
    """Attribution captured from the visit that produced a submission."""

    source: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    referrer: Optional[str] = None

    @property
    def resolved_source(self) -> str:
        return self.source or self.utm_source or "direct"


@dataclass
class Lead:
    """A stored, validated form submission."""

    id: str
    landing_page_id: str
    form_fields: List[FormField] = field(default_factory=list)  # schema snapshot
    form_data: Dict[str, Any] = field(default_factory=dict)  # label -> value
    status: LeadStatus = LeadStatus.NEW

    # Attribution
    source: str = "direct"
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    referrer: Optional[str] = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Joined from landing_pages on reads
    landing_page_title: Optional[str] = None


@dataclass
class LeadFilters:
    """Filters for the owner's lead list."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    landing_page_id: Optional[str] = None
    status: Optional[LeadStatus] = None
    search: Optional[str] = None
    limit: int = 100
    offset: int = 0
