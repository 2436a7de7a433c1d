"""End-to-end flows through CatalogService with a scripted backend."""
import asyncio

import pytest

from catalog.ingestion import StaticSessionProvider
from catalog.service import CatalogService
from catalog.settings import CatalogSettings
from conftest import ControlledBackend, make_page, wait_for_calls


@pytest.fixture
def backend():
    return ControlledBackend()


@pytest.fixture
def service(backend):
    settings = CatalogSettings(page_size=20, refresh_delay_seconds=0.01)
    return CatalogService(backend, StaticSessionProvider("token-1"), settings=settings)


@pytest.mark.asyncio
async def test_form_search_goes_through_query_builder(service, backend):
    task = asyncio.create_task(service.search({"title": " Engineer ", "minSalary": "abc", "company": ""}))
    await wait_for_calls(backend, 1)

    operation, query = backend.calls[0]
    assert operation == "search"
    assert query.title == "Engineer"
    assert query.min_salary is None
    assert query.company is None

    backend.resolve(0, make_page(["Engineer"] * 20, total_elements=45))
    state = await task
    assert state.status == "succeeded"
    assert service.snapshot().page.total_pages == 3


@pytest.mark.asyncio
async def test_changing_filters_restarts_at_first_page(service, backend):
    task = asyncio.create_task(service.search({"title": "Engineer", "page": 2}))
    await wait_for_calls(backend, 1)
    assert backend.calls[0][1].page == 2
    backend.resolve(0, make_page(["Engineer"] * 20, total_elements=60, number=2))
    await task

    task = asyncio.create_task(service.search({"title": "Engineer", "location": "Berlin", "page": 2}))
    await wait_for_calls(backend, 2)
    assert backend.calls[1][1].page == 0
    backend.resolve(1, make_page(["Engineer"]))
    await task


@pytest.mark.asyncio
async def test_ingest_then_refresh_lists_newest(service, backend):
    outcome = await service.ingest({"jobTitle": "React Developer", "maxResults": 50})
    assert outcome.accepted is True
    assert service.ingestion.is_refreshing is True

    await wait_for_calls(backend, 1)
    assert backend.calls[0] == ("list_all", (0, 20))
    backend.resolve(0, make_page(["React Developer"]))
    await service.ingestion.wait_for_refresh()

    assert service.ingestion.is_refreshing is False
    assert service.state.status == "succeeded"
    assert backend.ingestion_calls[0][1] == "token-1"


@pytest.mark.asyncio
async def test_clear_after_results(service, backend):
    task = asyncio.create_task(service.list_all())
    await wait_for_calls(backend, 1)
    backend.resolve(0, make_page(["A"] * 20, total_elements=45))
    await task

    service.clear()

    snapshot = service.snapshot()
    assert snapshot.page.to_dict() == {
        "content": [],
        "totalElements": 0,
        "totalPages": 0,
        "number": 0,
        "size": 0,
    }
    assert service.state.status == "idle"
    await service.aclose()
