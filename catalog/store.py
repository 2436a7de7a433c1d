"""In-memory holder for the currently displayed result page."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.models import ResultPage


class StoreSnapshot(BaseModel):
    """Read-only view of the store: the resident page and the last error."""

    model_config = ConfigDict(frozen=True)

    page: ResultPage = Field(default_factory=ResultPage.empty)
    error: Optional[str] = None


class ResultStore:
    """
    Holds exactly one page of postings plus pagination metadata.

    Pure state: no method performs I/O. SearchOrchestrator is the only writer;
    readers call get() and receive an immutable snapshot.
    """

    def __init__(self) -> None:
        self._page: ResultPage = ResultPage.empty()
        self._error: Optional[str] = None

    def set_page(self, page: ResultPage) -> None:
        self._page = page
        self._error = None

    def set_error(self, message: str) -> None:
        # The last good page stays resident; the error is reported alongside it.
        self._error = message

    def clear(self) -> None:
        self._page = ResultPage.empty()
        self._error = None

    def get(self) -> StoreSnapshot:
        return StoreSnapshot(page=self._page, error=self._error)

    @property
    def page(self) -> ResultPage:
        return self._page

    @property
    def error(self) -> Optional[str]:
        return self._error
