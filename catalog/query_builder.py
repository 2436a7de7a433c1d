"""Normalize user-entered filter fields into a canonical SearchQuery."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import pydantic

from catalog.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_BY,
    DEFAULT_SORT_DIR,
    FILTER_FIELDS,
    KNOWN_SOURCES,
    SORT_DIRECTIONS,
)
from catalog.models import SearchQuery
from exceptions import ValidationError

logger = logging.getLogger(__name__)

# Form fields arrive in the catalog's camelCase; the model uses snake_case.
_FIELD_ALIASES = {
    "minSalary": "min_salary",
    "maxSalary": "max_salary",
    "isRemote": "is_remote",
    "sortBy": "sort_by",
    "sortDir": "sort_dir",
}

_TRUTHY = {"true", "1", "yes", "on"}


def _canonical_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {_FIELD_ALIASES.get(str(key), str(key)): value for key, value in raw.items()}


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _parse_salary(field: str, value: Any) -> Optional[int]:
    """Non-numeric or negative salary input is dropped, never rejected."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip().replace(",", "").replace("_", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            logger.debug(f"[QueryBuilder] Dropping non-numeric {field}: {value!r}")
            return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    if number < 0:
        logger.debug(f"[QueryBuilder] Dropping negative {field}: {value!r}")
        return None
    return int(number)


def _parse_remote(value: Any) -> Optional[bool]:
    if value is True:
        return True
    if isinstance(value, str) and value.strip().lower() in _TRUTHY:
        return True
    return None


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class QueryBuilder:
    """Turns raw form input into SearchQuery values. Pure: no I/O, no state."""

    def __init__(self, default_page_size: int = DEFAULT_PAGE_SIZE):
        self.default_page_size = default_page_size if default_page_size > 0 else DEFAULT_PAGE_SIZE

    def build(self, raw_filters: Mapping[str, Any], previous: Optional[SearchQuery] = None) -> SearchQuery:
        """
        Build a canonical query from raw filter fields.

        Args:
            raw_filters: Form values keyed by snake_case or catalog camelCase names
            previous: Query currently displayed; when any filter differs from it
                the page index is reset to 0

        Returns:
            Normalized SearchQuery
        """
        if not isinstance(raw_filters, Mapping):
            raise ValidationError(
                "Filters must be a mapping",
                detail={"type": type(raw_filters).__name__},
            )

        raw = _canonical_keys(raw_filters)

        min_salary = _parse_salary("min_salary", raw.get("min_salary"))
        max_salary = _parse_salary("max_salary", raw.get("max_salary"))
        if min_salary is not None and max_salary is not None and min_salary > max_salary:
            min_salary, max_salary = max_salary, min_salary

        source = _clean_text(raw.get("source"))
        if source:
            source = source.lower()
            if source not in KNOWN_SOURCES:
                logger.debug(f"[QueryBuilder] Unrecognized source filter: {source}")

        fields: Dict[str, Any] = {
            "title": _clean_text(raw.get("title")),
            "company": _clean_text(raw.get("company")),
            "location": _clean_text(raw.get("location")),
            "min_salary": min_salary,
            "max_salary": max_salary,
            "is_remote": _parse_remote(raw.get("is_remote")),
            "source": source,
        }

        page = _parse_int(raw.get("page"))
        fields["page"] = page if page is not None and page >= 0 else 0

        size = _parse_int(raw.get("size"))
        if size is None or size <= 0:
            size = previous.size if previous is not None else self.default_page_size
        fields["size"] = size

        sort_by = _clean_text(raw.get("sort_by"))
        if sort_by is None:
            sort_by = previous.sort_by if previous is not None else DEFAULT_SORT_BY
        fields["sort_by"] = sort_by

        sort_dir = (_clean_text(raw.get("sort_dir")) or "").lower()
        if sort_dir not in SORT_DIRECTIONS:
            sort_dir = previous.sort_dir if previous is not None else DEFAULT_SORT_DIR
        fields["sort_dir"] = sort_dir

        if previous is not None and any(
            fields[name] != getattr(previous, name) for name in FILTER_FIELDS
        ):
            fields["page"] = 0

        try:
            return SearchQuery(**fields)
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Could not build search query",
                detail={"errors": e.errors(include_url=False)},
            ) from e

    def with_filter(self, query: SearchQuery, field: str, value: Any) -> SearchQuery:
        """Apply one filter change; the page index always goes back to 0."""
        name = _FIELD_ALIASES.get(field, field)
        if name not in FILTER_FIELDS:
            raise ValidationError(f"Unknown filter field: {field}", detail={"field": field})

        raw = query.model_dump()
        raw[name] = value
        updated = self.build(raw)
        return updated.model_copy(update={"page": 0})

    def with_page(self, query: SearchQuery, page: int) -> SearchQuery:
        """Move to another page keeping filters, size and sort."""
        return query.model_copy(update={"page": max(int(page), 0)})

    def reset(self) -> SearchQuery:
        """Query with every filter cleared and default pagination."""
        return SearchQuery(size=self.default_page_size)
