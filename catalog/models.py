"""Typed models for the job catalog client."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from catalog.constants import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_BY,
    DEFAULT_SORT_DIR,
    FILTER_FIELDS,
    SKILL_PREVIEW_LIMIT,
)

logger = logging.getLogger(__name__)

SortDirection = Literal["asc", "desc"]
OperationStatus = Literal["idle", "pending", "succeeded", "failed"]


class Posting(BaseModel):
    """A single job listing as returned by the catalog."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    external_id: Optional[str] = Field(None, alias="externalId")
    title: str = ""
    company: str = ""
    location: Optional[str] = None
    salary_min: Optional[float] = Field(None, alias="salaryMin")
    salary_max: Optional[float] = Field(None, alias="salaryMax")
    is_remote: bool = Field(False, alias="isRemote")
    skills: List[str] = Field(default_factory=list)
    description: str = ""
    job_url: str = Field("", alias="jobUrl")
    source: str = ""
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("title", "company", "description", "job_url", "source", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_remote", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("skills", mode="before")
    @classmethod
    def _ensure_skills(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [segment.strip() for segment in value.split(",") if segment.strip()]
        if not isinstance(value, (list, tuple)):
            return []
        return [str(item) for item in value if item]

    def skill_preview(self, limit: int = SKILL_PREVIEW_LIMIT) -> Tuple[List[str], int]:
        """First ``limit`` skills plus how many were left out."""
        shown = self.skills[:limit]
        return shown, len(self.skills) - len(shown)


class SearchQuery(BaseModel):
    """Canonical catalog query: filters, pagination and sort."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    min_salary: Optional[int] = Field(None, ge=0)
    max_salary: Optional[int] = Field(None, ge=0)
    is_remote: Optional[bool] = None
    source: Optional[str] = None
    page: int = Field(0, ge=0)
    size: int = Field(DEFAULT_PAGE_SIZE, gt=0)
    sort_by: str = DEFAULT_SORT_BY
    sort_dir: SortDirection = DEFAULT_SORT_DIR

    @field_validator("is_remote", mode="before")
    @classmethod
    def _remote_only_when_true(cls, value: Any) -> Optional[bool]:
        # Tri-state on the wire: either "true" or omitted
        return True if value is True else None

    @model_validator(mode="after")
    def _check_salary_range(self) -> "SearchQuery":
        if (
            self.min_salary is not None
            and self.max_salary is not None
            and self.min_salary > self.max_salary
        ):
            raise ValueError("min_salary must not exceed max_salary")
        return self

    @classmethod
    def unfiltered(cls, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> "SearchQuery":
        """Query used for list-all: no filters, most recent first."""
        return cls(page=page, size=size, sort_by=DEFAULT_SORT_BY, sort_dir="desc")

    def filters(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in FILTER_FIELDS}

    def has_filters(self) -> bool:
        return any(value is not None for value in self.filters().values())

    def to_params(self) -> Dict[str, str]:
        """Query-string parameters for ``GET /jobs/search``; absent filters are omitted."""
        params: Dict[str, str] = {}
        if self.title:
            params["title"] = self.title
        if self.company:
            params["company"] = self.company
        if self.location:
            params["location"] = self.location
        if self.min_salary is not None:
            params["minSalary"] = str(self.min_salary)
        if self.max_salary is not None:
            params["maxSalary"] = str(self.max_salary)
        if self.is_remote is not None:
            params["isRemote"] = "true"
        if self.source:
            params["source"] = self.source
        params["page"] = str(self.page)
        params["size"] = str(self.size)
        params["sortBy"] = self.sort_by
        params["sortDir"] = self.sort_dir
        return params


def _coerce_count(value: Any) -> int:
    """Lenient non-negative int; missing or malformed values count as zero."""
    if isinstance(value, bool):
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


class ResultPage(BaseModel):
    """One page of postings plus pagination metadata."""

    content: List[Posting] = Field(default_factory=list)
    total_elements: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)
    number: int = Field(0, ge=0)
    size: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _check_page_bounds(self) -> "ResultPage":
        if self.total_pages == 0 and self.number != 0:
            raise ValueError("number must be 0 when there are no pages")
        if self.total_pages > 0 and self.number >= self.total_pages:
            raise ValueError("number must be below total_pages")
        return self

    @classmethod
    def empty(cls, size: int = 0) -> "ResultPage":
        return cls(content=[], total_elements=0, total_pages=0, number=0, size=size)

    @classmethod
    def from_payload(cls, payload: Any, requested_size: int = DEFAULT_PAGE_SIZE) -> "ResultPage":
        """
        Build a page from a paginated catalog response.

        Malformed payloads degrade instead of failing: missing counters are
        treated as zero, postings that do not parse are skipped, and the page
        index is clamped into range.
        """
        if not isinstance(payload, Mapping):
            logger.warning(f"[ResultPage] Unexpected payload type {type(payload).__name__}; using empty page")
            return cls.empty(size=requested_size)

        raw_content = payload.get("content")
        if not isinstance(raw_content, list):
            raw_content = []

        content: List[Posting] = []
        skipped = 0
        for item in raw_content:
            if not isinstance(item, Mapping):
                skipped += 1
                continue
            try:
                content.append(Posting.model_validate(item))
            except ValidationError as e:
                skipped += 1
                logger.debug(f"[ResultPage] Skipping malformed posting: {e.error_count()} errors")
        if skipped:
            logger.warning(f"[ResultPage] Skipped {skipped} malformed postings")

        size = _coerce_count(payload.get("size")) or requested_size
        total_elements = max(_coerce_count(payload.get("totalElements")), len(content))
        if size > 0:
            total_pages = math.ceil(total_elements / size)
        else:
            total_pages = _coerce_count(payload.get("totalPages"))

        number = _coerce_count(payload.get("number"))
        if total_pages == 0:
            number = 0
        elif number >= total_pages:
            number = total_pages - 1

        return cls(
            content=content,
            total_elements=total_elements,
            total_pages=total_pages,
            number=number,
            size=size,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Catalog-shaped view: ``{content, totalElements, totalPages, number, size}``."""
        return {
            "content": [posting.model_dump(by_alias=True) for posting in self.content],
            "totalElements": self.total_elements,
            "totalPages": self.total_pages,
            "number": self.number,
            "size": self.size,
        }


class OperationState(BaseModel):
    """Lifecycle of the search/list-all operation family."""

    model_config = ConfigDict(frozen=True)

    status: OperationStatus = "idle"
    error: Optional[str] = None
    seq: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _error_iff_failed(self) -> "OperationState":
        if (self.status == "failed") != (self.error is not None):
            raise ValueError("error must be set exactly when status is failed")
        return self

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


class IngestionRequest(BaseModel):
    """Request to pull new postings from external providers into the catalog."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    job_title: str = Field("", alias="jobTitle")
    location: Optional[str] = None
    max_results: int = Field(DEFAULT_MAX_RESULTS, gt=0, alias="maxResults")

    @field_validator("max_results", mode="before")
    @classmethod
    def _default_max_results(cls, value: Any) -> Any:
        return DEFAULT_MAX_RESULTS if value is None or value == "" else value

    @field_validator("job_title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("location", mode="before")
    @classmethod
    def _blank_location(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None

    @property
    def is_submittable(self) -> bool:
        return bool(self.job_title)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"jobTitle": self.job_title, "maxResults": self.max_results}
        if self.location:
            payload["location"] = self.location
        return payload


class IngestionOutcome(BaseModel):
    """What happened to a single ingestion submission."""

    accepted: bool
    message: str
    refresh_scheduled: bool = False
    auth_required: bool = False


class CatalogStats(BaseModel):
    """Posting counts reported by ``GET /jobs/stats``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_jobs: int = Field(0, alias="totalJobs")
    jsearch_jobs: int = Field(0, alias="jSearchJobs")
    adzuna_jobs: int = Field(0, alias="adzunaJobs")
    service_type: Optional[str] = Field(None, alias="serviceType")

    @field_validator("total_jobs", "jsearch_jobs", "adzuna_jobs", mode="before")
    @classmethod
    def _lenient_count(cls, value: Any) -> int:
        return _coerce_count(value)
