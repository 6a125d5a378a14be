"""Search result models."""

from pydantic import BaseModel


class SearchHit(BaseModel):
    """Indexed page matching a query, with relevance score."""

    document_id: str
    page_id: str
    title: str
    level: int
    sequence: float
    score: float
