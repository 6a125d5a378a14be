"""Models package - re-exports for convenience."""

from backend.docstore.models.links import (
    LINK_TYPE_DOCUMENT,
    LINK_TYPE_SECTION,
    CandidateLink,
    ContentLink,
)
from backend.docstore.models.pages import (
    PAGE_TYPE_SECTION,
    Page,
    PageMeta,
    PageModel,
    Revision,
    RevisionSummary,
)
from backend.docstore.models.search import SearchHit

__all__ = [
    "LINK_TYPE_DOCUMENT",
    "LINK_TYPE_SECTION",
    "PAGE_TYPE_SECTION",
    "CandidateLink",
    "ContentLink",
    "Page",
    "PageMeta",
    "PageModel",
    "Revision",
    "RevisionSummary",
    "SearchHit",
]
