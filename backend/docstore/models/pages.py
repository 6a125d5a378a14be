"""Page, page meta and revision domain models."""

from datetime import datetime

from pydantic import BaseModel, Field

PAGE_TYPE_SECTION = "section"


class Page(BaseModel):
    """A titled content section belonging to a document."""

    ref_id: str = ""
    org_id: str = ""
    document_id: str
    user_id: str = ""
    content_type: str = "wysiwyg"
    page_type: str = PAGE_TYPE_SECTION
    level: int = Field(1, ge=1, description="Heading level")
    title: str = ""
    body: str = Field("", description="Rendered HTML content")
    revisions: int = Field(0, ge=0)
    sequence: float = Field(0.0, ge=0, description="Ordering key; 0 means unassigned")
    block_id: str = ""
    created: datetime | None = None
    revised: datetime | None = None


class PageMeta(BaseModel):
    """Sidecar metadata for a page: raw source and configuration."""

    page_id: str = ""
    org_id: str = ""
    user_id: str = ""
    document_id: str = ""
    raw_body: str = ""
    config: str = "{}"
    external_source: bool = False
    created: datetime | None = None
    revised: datetime | None = None


class PageModel(BaseModel):
    """Page together with its meta, as inserted by add_page."""

    page: Page
    meta: PageMeta = Field(default_factory=PageMeta)


class Revision(BaseModel):
    """Immutable historical snapshot of a page."""

    ref_id: str
    org_id: str
    document_id: str
    owner_id: str
    page_id: str
    user_id: str
    content_type: str
    page_type: str
    title: str
    body: str
    raw_body: str = ""
    config: str = "{}"
    created: datetime
    revised: datetime


class RevisionSummary(BaseModel):
    """Revision list entry joined with author display fields.

    Body, raw body and config are left out of list views.
    """

    ref_id: str
    org_id: str
    document_id: str
    owner_id: str
    page_id: str
    user_id: str
    content_type: str
    page_type: str
    title: str
    created: datetime
    revised: datetime
    email: str = ""
    firstname: str = ""
    lastname: str = ""
    initials: str = ""
    revisions: int = 0
