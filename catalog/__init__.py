"""Job catalog client: query building, result sequencing and ingestion refresh."""

from .models import (
    CatalogStats,
    IngestionOutcome,
    IngestionRequest,
    OperationState,
    Posting,
    ResultPage,
    SearchQuery,
)
from .client import CatalogBackend, CatalogClient
from .query_builder import QueryBuilder
from .store import ResultStore, StoreSnapshot
from .orchestrator import SearchOrchestrator
from .ingestion import IngestionCoordinator, SessionProvider, StaticSessionProvider
from .service import CatalogService
from .settings import CatalogSettings

__all__ = [
    "CatalogStats",
    "IngestionOutcome",
    "IngestionRequest",
    "OperationState",
    "Posting",
    "ResultPage",
    "SearchQuery",
    "CatalogBackend",
    "CatalogClient",
    "QueryBuilder",
    "ResultStore",
    "StoreSnapshot",
    "SearchOrchestrator",
    "IngestionCoordinator",
    "SessionProvider",
    "StaticSessionProvider",
    "CatalogService",
    "CatalogSettings",
]
