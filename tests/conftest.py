import asyncio
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Add project root to path to allow importing catalog, exceptions and observability
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog.client import CatalogBackend
from catalog.models import IngestionRequest, ResultPage, SearchQuery
from catalog.orchestrator import SearchOrchestrator
from catalog.store import ResultStore


def posting_payload(posting_id: int, title: str = "Software Engineer", **overrides: Any) -> Dict[str, Any]:
    payload = {
        "id": posting_id,
        "externalId": f"ext-{posting_id}",
        "title": title,
        "company": "Acme",
        "location": "Berlin",
        "salaryMin": 60000,
        "salaryMax": 90000,
        "isRemote": False,
        "skills": ["Python", "SQL"],
        "description": "Build things",
        "jobUrl": f"https://jobs.example.com/{posting_id}",
        "source": "jsearch",
        "createdAt": "2024-05-01T10:00:00",
        "updatedAt": "2024-05-01T10:00:00",
    }
    payload.update(overrides)
    return payload


def page_payload(
    titles: List[str], total_elements: int, number: int = 0, size: int = 20, start_id: int = 1
) -> Dict[str, Any]:
    return {
        "content": [posting_payload(start_id + i, title) for i, title in enumerate(titles)],
        "totalElements": total_elements,
        "totalPages": -(-total_elements // size) if size else 0,
        "number": number,
        "size": size,
    }


def make_page(titles: List[str], total_elements: Optional[int] = None, number: int = 0, size: int = 20) -> ResultPage:
    total = len(titles) if total_elements is None else total_elements
    return ResultPage.from_payload(page_payload(titles, total, number=number, size=size), requested_size=size)


class ControlledBackend(CatalogBackend):
    """Backend whose calls park until the test resolves them, in any order."""

    def __init__(self):
        self.calls: List[Tuple[str, Any]] = []
        self.pending: List[asyncio.Future] = []
        self.ingestion_calls: List[Tuple[IngestionRequest, Optional[str]]] = []
        self.ingestion_result: Any = "MOCK job fetch started. Results will be available shortly."

    async def _park(self, operation: str, args: Any) -> ResultPage:
        future = asyncio.get_running_loop().create_future()
        self.calls.append((operation, args))
        self.pending.append(future)
        return await future

    async def search(self, query: SearchQuery) -> ResultPage:
        return await self._park("search", query)

    async def list_all(self, page: int = 0, size: int = 20) -> ResultPage:
        return await self._park("list_all", (page, size))

    async def trigger_ingestion(self, request: IngestionRequest, token: Optional[str] = None) -> str:
        self.ingestion_calls.append((request, token))
        if isinstance(self.ingestion_result, Exception):
            raise self.ingestion_result
        return self.ingestion_result

    def resolve(self, index: int, page: ResultPage) -> None:
        self.pending[index].set_result(page)

    def reject(self, index: int, error: Exception) -> None:
        self.pending[index].set_exception(error)


async def wait_for_calls(backend: ControlledBackend, count: int) -> None:
    for _ in range(200):
        if len(backend.calls) >= count:
            return
        await asyncio.sleep(0.005)
    raise AssertionError(f"expected {count} backend calls, saw {len(backend.calls)}")


@pytest.fixture
def backend():
    return ControlledBackend()


@pytest.fixture
def store():
    return ResultStore()


@pytest.fixture
def orchestrator(backend, store):
    return SearchOrchestrator(backend, store)
