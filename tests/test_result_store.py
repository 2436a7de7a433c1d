from catalog.models import ResultPage
from catalog.store import ResultStore
from conftest import make_page


def test_starts_empty():
    snapshot = ResultStore().get()
    assert snapshot.page == ResultPage.empty()
    assert snapshot.error is None


def test_set_page_replaces_resident_page():
    store = ResultStore()
    store.set_page(make_page(["A", "B"]))
    store.set_page(make_page(["C"]))
    assert [p.title for p in store.get().page.content] == ["C"]


def test_set_error_keeps_last_good_page():
    store = ResultStore()
    page = make_page(["A"])
    store.set_page(page)
    store.set_error("Request timed out: search")

    snapshot = store.get()
    assert snapshot.page == page
    assert snapshot.error == "Request timed out: search"


def test_set_page_clears_error():
    store = ResultStore()
    store.set_error("boom")
    store.set_page(make_page(["A"]))
    assert store.error is None


def test_clear_resets_everything():
    store = ResultStore()
    store.set_page(make_page(["A"] * 20, total_elements=45, number=2))
    store.set_error("boom")
    store.clear()

    page = store.get().page
    assert page.to_dict()["content"] == []
    assert (page.total_elements, page.total_pages, page.number) == (0, 0, 0)
    assert store.error is None


def test_snapshot_is_frozen():
    store = ResultStore()
    snapshot = store.get()
    store.set_page(make_page(["A"]))
    assert snapshot.page.total_elements == 0
