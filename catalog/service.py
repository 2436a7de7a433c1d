"""Catalog service wiring the query builder, orchestrator and ingestion coordinator."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from catalog.client import CatalogBackend, CatalogClient
from catalog.ingestion import IngestionCoordinator, SessionProvider, StaticSessionProvider
from catalog.models import IngestionOutcome, OperationState, SearchQuery
from catalog.orchestrator import SearchOrchestrator
from catalog.query_builder import QueryBuilder
from catalog.settings import CatalogSettings
from catalog.store import ResultStore, StoreSnapshot

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Entry point for a presentation layer.

    Raw form values go through QueryBuilder before reaching the orchestrator;
    readers observe results through ``snapshot()``.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        session: Optional[SessionProvider] = None,
        *,
        settings: Optional[CatalogSettings] = None,
    ):
        self.settings = settings or CatalogSettings()
        self.backend = backend
        self.session = session if session is not None else StaticSessionProvider()
        self.builder = QueryBuilder(default_page_size=self.settings.page_size)
        self.store = ResultStore()
        self.orchestrator = SearchOrchestrator(
            backend, self.store, default_page_size=self.settings.page_size
        )
        self.ingestion = IngestionCoordinator(
            backend,
            self.orchestrator,
            self.session,
            refresh_delay_seconds=self.settings.refresh_delay_seconds,
            refresh_page_size=self.settings.page_size,
        )

    @classmethod
    def from_env(cls, session: Optional[SessionProvider] = None) -> "CatalogService":
        settings = CatalogSettings.from_env()
        logger.info(f"[CatalogService] Using catalog API at {settings.api_url}")
        return cls(CatalogClient.from_settings(settings), session, settings=settings)

    async def search(self, raw_filters: Mapping[str, Any]) -> OperationState:
        """Build a query from form input and submit it; filter changes restart at page 0."""
        query = self.builder.build(raw_filters, previous=self.orchestrator.last_query)
        return await self.orchestrator.submit_search(query)

    async def submit(self, query: SearchQuery) -> OperationState:
        return await self.orchestrator.submit_search(query)

    async def list_all(self, page: int = 0, size: Optional[int] = None) -> OperationState:
        return await self.orchestrator.list_all(page, size)

    async def go_to_page(self, page: int) -> OperationState:
        return await self.orchestrator.go_to_page(page)

    def clear(self) -> None:
        self.orchestrator.clear()

    async def ingest(self, request: Mapping[str, Any]) -> Optional[IngestionOutcome]:
        return await self.ingestion.submit_ingestion(request)

    def snapshot(self) -> StoreSnapshot:
        return self.store.get()

    @property
    def state(self) -> OperationState:
        return self.orchestrator.state

    async def aclose(self) -> None:
        await self.ingestion.aclose()
