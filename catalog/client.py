"""HTTP transport for the job catalog and ingestion endpoints.

Endpoints (relative to the configured API URL):
  GET  /jobs/search             : filtered, paginated postings
  GET  /jobs/all                : unfiltered, paginated postings
  POST /jobs/fetch              : trigger ingestion (bearer token required)
  GET  /jobs/stats              : posting counts per source
  GET  /jobs/filters/locations  : distinct locations
  GET  /jobs/filters/companies  : distinct companies
  GET  /jobs/{id}               : single posting
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from catalog.constants import DEFAULT_PAGE_SIZE
from catalog.models import CatalogStats, IngestionRequest, Posting, ResultPage, SearchQuery
from catalog.settings import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS, CatalogSettings
from exceptions import AuthRequiredError, TransportError, ValidationError
from observability.metrics import catalog_request_duration_seconds

logger = logging.getLogger(__name__)


class CatalogBackend(ABC):
    """Remote operations the orchestration layer depends on."""

    @abstractmethod
    async def search(self, query: SearchQuery) -> ResultPage:
        pass

    @abstractmethod
    async def list_all(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> ResultPage:
        pass

    @abstractmethod
    async def trigger_ingestion(self, request: IngestionRequest, token: Optional[str] = None) -> str:
        pass


class CatalogClient(CatalogBackend):
    """Catalog API over httpx; raises TransportError/AuthRequiredError on failure."""

    def __init__(self, base_url: str = DEFAULT_API_URL, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "CatalogClient":
        return cls(base_url=settings.api_url, timeout_seconds=settings.timeout_seconds)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Low-level request helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when the body is not JSON)."""
        url = self._url(path)
        with catalog_request_duration_seconds.labels(operation=operation).time():
            try:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    if method == "GET":
                        resp = await client.get(url, params=params, headers=headers)
                    else:
                        resp = await client.post(url, json=json, headers=headers)
                    resp.raise_for_status()
            except httpx.TimeoutException as e:
                logger.error(f"[CatalogClient] {operation} timed out: {e}")
                raise TransportError(f"Request timed out: {operation}", path=path) from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.error(f"[CatalogClient] {operation} failed with HTTP {status}")
                raise TransportError(
                    _status_message(operation, e.response), status_code=status, path=path
                ) from e
            except httpx.HTTPError as e:
                logger.error(f"[CatalogClient] {operation} request error: {type(e).__name__}: {e}")
                raise TransportError(f"Request failed: {operation}: {e}", path=path) from e

        try:
            return resp.json()
        except ValueError:
            logger.warning(f"[CatalogClient] {operation} returned a non-JSON body")
            return None

    # ------------------------------------------------------------------
    # Catalog queries
    # ------------------------------------------------------------------

    async def search(self, query: SearchQuery) -> ResultPage:
        payload = await self._request("GET", "jobs/search", operation="search", params=query.to_params())
        return ResultPage.from_payload(payload, requested_size=query.size)

    async def list_all(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> ResultPage:
        query = SearchQuery.unfiltered(page=page, size=size)
        params = {
            "page": str(query.page),
            "size": str(query.size),
            "sortBy": query.sort_by,
            "sortDir": query.sort_dir,
        }
        payload = await self._request("GET", "jobs/all", operation="list_all", params=params)
        return ResultPage.from_payload(payload, requested_size=size)

    async def get_stats(self) -> CatalogStats:
        payload = await self._request("GET", "jobs/stats", operation="stats")
        if not isinstance(payload, dict):
            return CatalogStats()
        return CatalogStats.model_validate(payload)

    async def distinct_locations(self) -> List[str]:
        payload = await self._request("GET", "jobs/filters/locations", operation="locations")
        return _string_list(payload)

    async def distinct_companies(self) -> List[str]:
        payload = await self._request("GET", "jobs/filters/companies", operation="companies")
        return _string_list(payload)

    async def get_posting(self, posting_id: int) -> Posting:
        if isinstance(posting_id, bool) or not isinstance(posting_id, int) or posting_id <= 0:
            raise ValidationError("Posting id must be a positive integer", detail={"id": posting_id})
        path = f"jobs/{posting_id}"
        payload = await self._request("GET", path, operation="posting")
        if not isinstance(payload, dict):
            raise TransportError("Malformed posting response", path=path)
        return Posting.model_validate(payload)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def trigger_ingestion(self, request: IngestionRequest, token: Optional[str] = None) -> str:
        """
        Ask the catalog to fetch new postings from external providers.

        The server acknowledges immediately and ingests in the background.
        Without a token the request is still sent; the server's rejection is
        reported as AuthRequiredError.

        Returns:
            Acknowledgement message from the server
        """
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            payload = await self._request(
                "POST", "jobs/fetch", operation="ingest", json=request.to_payload(), headers=headers
            )
        except TransportError as e:
            if e.status_code in (401, 403):
                raise AuthRequiredError(
                    "Login required to fetch new jobs",
                    status_code=e.status_code,
                    path="jobs/fetch",
                ) from e
            raise

        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return "Job fetch started. Results will be available shortly."


def _status_message(operation: str, response: httpx.Response) -> str:
    """Prefer the server's own message when the error body carries one."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if body.get(key):
                return str(body[key])
    return f"{operation} failed with HTTP {response.status_code}"


def _string_list(payload: Any) -> List[str]:
    if not isinstance(payload, list):
        return []
    return [str(item) for item in payload if item]
