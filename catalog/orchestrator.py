"""Search orchestration: dispatch catalog queries and reconcile their results."""

from __future__ import annotations

import logging
from typing import Awaitable, Optional

from catalog.client import CatalogBackend
from catalog.constants import DEFAULT_PAGE_SIZE
from catalog.models import OperationState, ResultPage, SearchQuery
from catalog.store import ResultStore
from exceptions import JobCatalogError
from observability.logging import correlation_id_context
from observability.metrics import (
    catalog_requests_total,
    catalog_results_count,
    catalog_stale_responses_total,
)

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """
    Issues search and list-all requests and writes their results into a ResultStore.

    Every dispatch takes the next sequence number. When a request settles, its
    result is applied only if its number is still the highest dispatched;
    anything older is dropped, so the store always reflects the most recently
    dispatched query whatever order the responses arrive in. Nothing is
    cancelled on the wire.

    Errors from the backend are turned into a failed OperationState and never
    propagate to callers. The last good page stays in the store.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        store: Optional[ResultStore] = None,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.backend = backend
        self.store = store if store is not None else ResultStore()
        self.default_page_size = default_page_size
        self._seq = 0
        self._state = OperationState()
        self._last_query: Optional[SearchQuery] = None
        self._last_operation: Optional[str] = None

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def latest_seq(self) -> int:
        return self._seq

    @property
    def last_query(self) -> Optional[SearchQuery]:
        return self._last_query

    def _dispatch(self, operation: str, query: SearchQuery) -> int:
        self._seq += 1
        self._state = OperationState(status="pending", seq=self._seq)
        self._last_query = query
        self._last_operation = operation
        return self._seq

    def _is_current(self, seq: int) -> bool:
        return seq == self._seq

    async def submit_search(self, query: SearchQuery) -> OperationState:
        """Search the catalog with ``query``; returns the state after this request settles."""
        seq = self._dispatch("search", query)
        return await self._settle("search", seq, self.backend.search(query))

    async def list_all(self, page: int = 0, size: Optional[int] = None) -> OperationState:
        """List every posting, most recent first."""
        size = size if size and size > 0 else self.default_page_size
        page = max(page, 0)
        seq = self._dispatch("list_all", SearchQuery.unfiltered(page=page, size=size))
        return await self._settle("list_all", seq, self.backend.list_all(page, size))

    async def go_to_page(self, page: int) -> OperationState:
        """Re-run the last operation on another page."""
        if self._last_operation == "search" and self._last_query is not None:
            return await self.submit_search(self._last_query.model_copy(update={"page": max(page, 0)}))
        size = self._last_query.size if self._last_query is not None else self.default_page_size
        return await self.list_all(page, size)

    def clear(self) -> None:
        """Empty the store and go idle; requests still in flight become stale."""
        self._seq += 1
        self._state = OperationState(status="idle", seq=self._seq)
        self._last_query = None
        self._last_operation = None
        self.store.clear()
        logger.info("[SearchOrchestrator] Cleared results", extra={"seq": self._seq})

    async def _settle(self, operation: str, seq: int, pending: Awaitable[ResultPage]) -> OperationState:
        with correlation_id_context():
            logger.info(
                f"[SearchOrchestrator] {operation} dispatched",
                extra={"operation": operation, "seq": seq},
            )
            try:
                page = await pending
            except JobCatalogError as e:
                return self._fail(operation, seq, e.message)
            except Exception as e:
                logger.exception(f"[SearchOrchestrator] Unexpected {operation} error")
                return self._fail(operation, seq, f"Unexpected error: {type(e).__name__}: {e}")

            if not self._is_current(seq):
                self._discard(operation, seq)
                return self._state

            self.store.set_page(page)
            self._state = OperationState(status="succeeded", seq=seq)
            catalog_requests_total.labels(operation=operation, outcome="succeeded").inc()
            catalog_results_count.labels(operation=operation).observe(len(page.content))
            logger.info(
                f"[SearchOrchestrator] {operation} succeeded",
                extra={
                    "operation": operation,
                    "seq": seq,
                    "result_count": len(page.content),
                    "total_elements": page.total_elements,
                    "page": page.number,
                },
            )
            return self._state

    def _fail(self, operation: str, seq: int, message: str) -> OperationState:
        if not self._is_current(seq):
            self._discard(operation, seq)
            return self._state

        self._state = OperationState(status="failed", error=message, seq=seq)
        self.store.set_error(message)
        catalog_requests_total.labels(operation=operation, outcome="failed").inc()
        logger.warning(
            f"[SearchOrchestrator] {operation} failed: {message}",
            extra={"operation": operation, "seq": seq},
        )
        return self._state

    def _discard(self, operation: str, seq: int) -> None:
        catalog_requests_total.labels(operation=operation, outcome="stale").inc()
        catalog_stale_responses_total.labels(operation=operation).inc()
        logger.debug(
            f"[SearchOrchestrator] Discarding stale {operation} response",
            extra={"operation": operation, "seq": seq, "latest_seq": self._seq},
        )
