"""Shared constants for the catalog client."""

DEFAULT_PAGE_SIZE = 20
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_DIR = "desc"
SORT_DIRECTIONS = ("asc", "desc")

# Ingestion defaults
DEFAULT_MAX_RESULTS = 50
# Heuristic wait before re-listing the catalog after an accepted ingestion.
# The fetch endpoint acknowledges immediately and ingests in the background.
INGESTION_REFRESH_DELAY_SECONDS = 5.0

# Provider identifiers the catalog tags postings with
KNOWN_SOURCES = {
    "jsearch",
    "adzuna",
}

# Filter fields of a SearchQuery; any change to these resets pagination
FILTER_FIELDS = (
    "title",
    "company",
    "location",
    "min_salary",
    "max_salary",
    "is_remote",
    "source",
)

SKILL_PREVIEW_LIMIT = 6
