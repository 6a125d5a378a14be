"""Search index adapter for an external HTTP indexing service."""

from typing import Any

import httpx

from backend.docstore.errors import SearchIndexError
from backend.docstore.models.pages import Page


class HttpSearchIndex:
    """SearchIndex that forwards notifications to a remote service.

    Endpoints (all JSON, all idempotent on the service side):
        PUT    /orgs/{org}/pages/{page}           add or replace a page
        PATCH  /orgs/{org}/pages/{page}           partial update (sequence, level)
        DELETE /orgs/{org}/documents/{doc}/pages/{page}

    Every call runs under a bounded timeout; transport errors, timeouts
    and non-2xx responses all raise SearchIndexError. A client the index
    creates itself is closed after each call; an injected one is left open.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout_ms: int = 2000,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_ms / 1000.0
        self._client = client

    async def add(self, org_id: str, page: Page) -> None:
        await self._send("add", "PUT", f"/orgs/{org_id}/pages/{page.ref_id}", _page_payload(page))

    async def update(self, org_id: str, page: Page) -> None:
        await self._send(
            "update", "PUT", f"/orgs/{org_id}/pages/{page.ref_id}", _page_payload(page)
        )

    async def update_sequence(
        self, org_id: str, document_id: str, page_id: str, sequence: float
    ) -> None:
        await self._send(
            "update_sequence",
            "PATCH",
            f"/orgs/{org_id}/pages/{page_id}",
            {"document_id": document_id, "sequence": sequence},
        )

    async def update_level(self, org_id: str, document_id: str, page_id: str, level: int) -> None:
        await self._send(
            "update_level",
            "PATCH",
            f"/orgs/{org_id}/pages/{page_id}",
            {"document_id": document_id, "level": level},
        )

    async def delete(self, org_id: str, document_id: str, page_id: str) -> None:
        await self._send(
            "delete", "DELETE", f"/orgs/{org_id}/documents/{document_id}/pages/{page_id}"
        )

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        client = self._client or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await client.request(
                method, f"{self._base_url}{path}", json=payload, timeout=self._timeout
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SearchIndexError(operation, "timeout") from e
        except httpx.HTTPStatusError as e:
            raise SearchIndexError(operation, f"http_{e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SearchIndexError(operation, "network") from e
        finally:
            if self._client is None:
                await client.aclose()


def _page_payload(page: Page) -> dict[str, Any]:
    return {
        "document_id": page.document_id,
        "title": page.title,
        "body": page.body,
        "level": page.level,
        "sequence": page.sequence,
        "page_type": page.page_type,
    }
