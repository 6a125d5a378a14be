"""Error kinds raised by the persistence layer.

Callers catch ``DocstoreError`` to roll back the enclosing transaction.
Nothing here retries.
"""


class DocstoreError(Exception):
    """Base class for all docstore failures."""

    pass


class InvalidPayloadError(DocstoreError):
    """Caller supplied malformed input."""

    pass


class NotAuthenticatedError(DocstoreError):
    """Request context lacks an organization or user identity."""

    pass


class RecordNotFoundError(DocstoreError):
    """A required lookup matched zero rows."""

    def __init__(self, entity: str, ref_id: str) -> None:
        super().__init__(f"{entity} {ref_id} not found")
        self.entity = entity
        self.ref_id = ref_id


class StoreError(DocstoreError):
    """A statement against the relational store failed."""

    pass


class SearchIndexError(DocstoreError):
    """Search index sync failed or timed out."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"search index {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
