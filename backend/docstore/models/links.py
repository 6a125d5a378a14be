"""Content link domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

LINK_TYPE_DOCUMENT = "document"
LINK_TYPE_SECTION = "section"


class CandidateLink(BaseModel):
    """Outgoing reference found in rendered page content."""

    model_config = ConfigDict(frozen=True)

    ref_id: str = ""
    space_id: str = ""
    target_document_id: str = ""
    target_id: str = ""
    link_type: str = ""


class ContentLink(BaseModel):
    """Stored directed reference from a source page to a page or whole document."""

    ref_id: str = ""
    org_id: str = ""
    space_id: str = ""
    user_id: str = ""
    link_type: str
    source_document_id: str
    source_page_id: str
    target_document_id: str = ""
    target_id: str = ""
    orphan: bool = False
    created: datetime | None = None
    revised: datetime | None = None

    def identity(self) -> tuple[str, str, str]:
        """Key used to match a link against previously stored links."""
        return (self.link_type, self.target_document_id, self.target_id)
