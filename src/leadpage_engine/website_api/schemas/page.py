"""Pydantic models for landing page requests and responses."""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from ...forms.schema import FormField
from ...storage.models import LandingPage, DEFAULT_BUTTON_TEXT, DEFAULT_BUTTON_COLOR


class FormFieldSchema(BaseModel):
    id: str
    type: str = "text"
    label: str
    placeholder: str = ""
    required: bool = False
    options: List[str] = Field(default_factory=list)

    def to_field(self) -> FormField:
        return FormField(
            id=self.id,
            type=self.type,
            label=self.label,
            placeholder=self.placeholder,
            required=self.required,
            options=list(self.options),
        )

    @classmethod
    def from_field(cls, f: FormField) -> "FormFieldSchema":
        return cls(
            id=f.id,
            type=f.type,
            label=f.label,
            placeholder=f.placeholder,
            required=f.required,
            options=list(f.options),
        )


class PageCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    logo_url: str = ""
    background_url: str = ""
    form_fields: List[FormFieldSchema] = Field(default_factory=list)
    custom_html: str = ""
    use_custom_html: bool = False
    button_text: str = DEFAULT_BUTTON_TEXT
    button_color: str = DEFAULT_BUTTON_COLOR


class PageUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    logo_url: Optional[str] = None
    background_url: Optional[str] = None
    form_fields: Optional[List[FormFieldSchema]] = None
    custom_html: Optional[str] = None
    use_custom_html: Optional[bool] = None
    button_text: Optional[str] = None
    button_color: Optional[str] = None


class PageResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: str
    logo_url: str
    background_url: str
    form_fields: List[FormFieldSchema]
    custom_html: str
    use_custom_html: bool
    button_text: str
    button_color: str
    status: str
    visits: int
    conversions: int
    conversion_rate: float
    share_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_page(cls, page: LandingPage, share_url: Optional[str] = None) -> "PageResponse":
        return cls(
            id=page.id,
            user_id=page.user_id,
            title=page.title,
            description=page.description,
            logo_url=page.logo_url,
            background_url=page.background_url,
            form_fields=[FormFieldSchema.from_field(f) for f in page.form_fields],
            custom_html=page.custom_html,
            use_custom_html=page.use_custom_html,
            button_text=page.button_text,
            button_color=page.button_color,
            status=page.status.value,
            visits=page.visits,
            conversions=page.conversions,
            conversion_rate=page.conversion_rate,
            share_url=share_url,
            created_at=page.created_at,
            updated_at=page.updated_at,
        )


class PublicPageContent(BaseModel):
    """What a visitor sees; owner-only fields and counters are left out."""
    id: str
    title: str
    description: str
    logo_url: str
    background_url: str
    form_fields: List[FormFieldSchema]
    custom_html: str
    use_custom_html: bool
    button_text: str
    button_color: str

    @classmethod
    def from_page(cls, page: LandingPage) -> "PublicPageContent":
        return cls(
            id=page.id,
            title=page.title,
            description=page.description,
            logo_url=page.logo_url,
            background_url=page.background_url,
            form_fields=[FormFieldSchema.from_field(f) for f in page.form_fields],
            custom_html=page.custom_html,
            use_custom_html=page.use_custom_html,
            button_text=page.button_text,
            button_color=page.button_color,
        )


class PublicPageResponse(BaseModel):
    state: str  # ok / not_published
    accepts_submissions: bool
    page: Optional[PublicPageContent] = None
