"""Ingestion coordination: trigger provider fetches and refresh the catalog view afterwards."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

import pydantic

from catalog.client import CatalogBackend
from catalog.constants import DEFAULT_PAGE_SIZE, INGESTION_REFRESH_DELAY_SECONDS
from catalog.models import IngestionOutcome, IngestionRequest
from catalog.orchestrator import SearchOrchestrator
from exceptions import AuthRequiredError, JobCatalogError
from observability.logging import correlation_id_context
from observability.metrics import ingestion_refreshes_total, ingestion_requests_total

logger = logging.getLogger(__name__)


def _blank_title(raw: Mapping[str, Any]) -> bool:
    title = raw.get("jobTitle", raw.get("job_title"))
    return title is None or not str(title).strip()


class SessionProvider(ABC):
    """Supplies the bearer credential of the logged-in user, if any."""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        pass


class StaticSessionProvider(SessionProvider):
    """Holds a token set at login and dropped at logout."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class IngestionCoordinator:
    """
    Triggers ingestion of new postings and schedules one delayed catalog refresh.

    The fetch endpoint only acknowledges the request; ingestion itself runs
    server-side with no completion signal. After an accepted submission the
    coordinator waits a fixed delay and then asks the orchestrator to list the
    catalog again. The delay is a best-effort guess: ingestion may finish later
    or fail silently on the server.

    The coordinator never writes result data itself; the refresh goes through
    SearchOrchestrator.list_all and is sequenced like any other request.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        orchestrator: SearchOrchestrator,
        session: SessionProvider,
        *,
        refresh_delay_seconds: float = INGESTION_REFRESH_DELAY_SECONDS,
        refresh_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.backend = backend
        self.orchestrator = orchestrator
        self.session = session
        self.refresh_delay_seconds = refresh_delay_seconds
        self.refresh_page_size = refresh_page_size
        self.last_outcome: Optional[IngestionOutcome] = None
        self._refreshing = False
        self._submitting = False
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    async def submit_ingestion(
        self, request: Union[IngestionRequest, Mapping[str, Any]]
    ) -> Optional[IngestionOutcome]:
        """
        Submit one ingestion request.

        Returns None without touching the network when the job title is blank,
        or while a submission or armed refresh is already in progress.
        Otherwise returns the outcome as soon as the server has answered.
        """
        if not isinstance(request, IngestionRequest):
            if isinstance(request, Mapping) and _blank_title(request):
                logger.debug("[IngestionCoordinator] Ignoring ingestion with blank job title")
                return None
            try:
                request = IngestionRequest.model_validate(request)
            except pydantic.ValidationError as e:
                message = f"Invalid ingestion request: {e.error_count()} invalid field(s)"
                logger.warning(f"[IngestionCoordinator] {message}")
                ingestion_requests_total.labels(outcome="invalid").inc()
                return self._report(IngestionOutcome(accepted=False, message=message))

        if not request.is_submittable:
            logger.debug("[IngestionCoordinator] Ignoring ingestion with blank job title")
            return None

        if self._refreshing or self._submitting:
            logger.info(
                "[IngestionCoordinator] Ingestion blocked: previous submission still in progress",
                extra={"refreshing": self._refreshing, "submitting": self._submitting},
            )
            ingestion_requests_total.labels(outcome="skipped").inc()
            return None

        token = self.session.get_token()
        if not token:
            logger.warning("[IngestionCoordinator] No session token; the server will reject the request")

        self._submitting = True
        try:
            with correlation_id_context():
                logger.info(
                    "[IngestionCoordinator] Submitting ingestion",
                    extra={
                        "job_title": request.job_title,
                        "location": request.location,
                        "max_results": request.max_results,
                    },
                )
                try:
                    message = await self.backend.trigger_ingestion(request, token)
                except AuthRequiredError as e:
                    ingestion_requests_total.labels(outcome="auth_required").inc()
                    logger.warning(f"[IngestionCoordinator] Ingestion rejected: {e.message}")
                    return self._report(
                        IngestionOutcome(accepted=False, message=e.message, auth_required=True)
                    )
                except JobCatalogError as e:
                    ingestion_requests_total.labels(outcome="rejected").inc()
                    logger.warning(f"[IngestionCoordinator] Ingestion failed: {e.message}")
                    return self._report(IngestionOutcome(accepted=False, message=e.message))
                except Exception as e:
                    ingestion_requests_total.labels(outcome="rejected").inc()
                    logger.exception("[IngestionCoordinator] Unexpected ingestion error")
                    message = f"Unexpected error: {type(e).__name__}: {e}"
                    return self._report(IngestionOutcome(accepted=False, message=message))

                ingestion_requests_total.labels(outcome="accepted").inc()
                self._arm_refresh()
                logger.info(
                    f"[IngestionCoordinator] Ingestion accepted; refreshing in {self.refresh_delay_seconds}s"
                )
                return self._report(
                    IngestionOutcome(accepted=True, message=message, refresh_scheduled=True)
                )
        finally:
            self._submitting = False

    def _report(self, outcome: IngestionOutcome) -> IngestionOutcome:
        self.last_outcome = outcome
        return outcome

    def _arm_refresh(self) -> None:
        self._refreshing = True
        self._refresh_task = asyncio.create_task(self._refresh_after_delay())
        # Also covers a task cancelled before its first step
        self._refresh_task.add_done_callback(self._refresh_done)

    def _refresh_done(self, task: asyncio.Task) -> None:
        if task is self._refresh_task:
            self._refreshing = False

    async def _refresh_after_delay(self) -> None:
        try:
            await asyncio.sleep(self.refresh_delay_seconds)
            ingestion_refreshes_total.inc()
            logger.info("[IngestionCoordinator] Refreshing catalog after ingestion")
            await self.orchestrator.list_all(0, self.refresh_page_size)
        finally:
            self._refreshing = False

    async def wait_for_refresh(self) -> None:
        """Wait until an armed refresh (if any) has run."""
        task = self._refresh_task
        if task is None or task.cancelled():
            return
        await task

    async def aclose(self) -> None:
        """Drop a pending refresh on shutdown."""
        task = self._refresh_task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self._refreshing = False
