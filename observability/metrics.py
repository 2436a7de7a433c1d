"""
Prometheus metrics for the job catalog client.

Provides RED metrics (Rate, Errors, Duration) for catalog requests plus
counters for discarded stale responses and ingestion triggers.
"""

from prometheus_client import (
    Counter,
    Histogram,
    REGISTRY,
)

# Use the default registry
metrics_registry = REGISTRY

# Catalog request metrics (operation: search, list_all, ingest, stats, ...)
catalog_requests_total = Counter(
    "catalog_requests_total",
    "Total catalog requests by outcome",
    ["operation", "outcome"],  # outcome: succeeded, failed, stale
    registry=metrics_registry,
)

catalog_request_duration_seconds = Histogram(
    "catalog_request_duration_seconds",
    "Catalog request duration in seconds",
    ["operation"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=metrics_registry,
)

catalog_stale_responses_total = Counter(
    "catalog_stale_responses_total",
    "Responses discarded because a newer request was dispatched",
    ["operation"],
    registry=metrics_registry,
)

catalog_results_count = Histogram(
    "catalog_results_count",
    "Number of postings on each stored page",
    ["operation"],
    buckets=[0, 1, 5, 10, 20, 50, 100],
    registry=metrics_registry,
)

# Ingestion metrics
ingestion_requests_total = Counter(
    "ingestion_requests_total",
    "Total ingestion triggers by outcome",
    ["outcome"],  # accepted, rejected, auth_required, skipped
    registry=metrics_registry,
)

ingestion_refreshes_total = Counter(
    "ingestion_refreshes_total",
    "Delayed catalog refreshes fired after an accepted ingestion",
    registry=metrics_registry,
)
