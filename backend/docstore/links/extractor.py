"""Content link extractor - find outgoing references in rendered page HTML.

Pure function with no I/O. Only anchors carrying the ``data-content-link``
marker attribute are content links; ordinary hyperlinks are ignored.
"""

from collections.abc import Iterator

from bs4 import BeautifulSoup, Tag

from backend.docstore.models.links import CandidateLink
from backend.docstore.utils.html import HTML_PARSER

LINK_MARKER = "data-content-link"

# HTML attribute -> CandidateLink field
_LINK_ATTRIBUTES = {
    "data-link-id": "ref_id",
    "data-link-space-id": "space_id",
    "data-link-target-document-id": "target_document_id",
    "data-link-target-id": "target_id",
    "data-link-type": "link_type",
}


class ContentLinks:
    """Lazy, finite, restartable sequence of links found in a page body.

    Nothing is parsed until iteration starts, and every new iteration
    parses the body again from the beginning.
    """

    def __init__(self, body: str, parser: str = HTML_PARSER) -> None:
        self._body = body
        self._parser = parser

    def __iter__(self) -> Iterator[CandidateLink]:
        if not self._body or not self._body.strip():
            return

        soup = BeautifulSoup(self._body, self._parser)
        for anchor in soup.find_all("a"):
            if isinstance(anchor, Tag) and anchor.has_attr(LINK_MARKER):
                yield _to_candidate(anchor)

    def __repr__(self) -> str:
        return f"ContentLinks(body_len={len(self._body)})"


def _to_candidate(anchor: Tag) -> CandidateLink:
    fields: dict[str, str] = {}
    for attr, field in _LINK_ATTRIBUTES.items():
        value = anchor.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        fields[field] = (value or "").strip()
    return CandidateLink(**fields)


def get_content_links(body: str) -> ContentLinks:
    """Return the content links referenced by rendered HTML.

    Args:
        body: Rendered page HTML

    Returns:
        Restartable iterable of CandidateLink, in document order
    """
    return ContentLinks(body)
