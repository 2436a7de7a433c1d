"""
Observability infrastructure for the job catalog client.

Provides:
- Logging with per-operation correlation ids and credential redaction
- Prometheus metrics for catalog and ingestion requests
"""

from .logging import setup_logging, correlation_id_context, get_correlation_id
from .metrics import (
    metrics_registry,
    catalog_requests_total,
    catalog_request_duration_seconds,
    catalog_stale_responses_total,
    catalog_results_count,
    ingestion_requests_total,
    ingestion_refreshes_total,
)

__all__ = [
    "setup_logging",
    "correlation_id_context",
    "get_correlation_id",
    "metrics_registry",
    "catalog_requests_total",
    "catalog_request_duration_seconds",
    "catalog_stale_responses_total",
    "catalog_results_count",
    "ingestion_requests_total",
    "ingestion_refreshes_total",
]
