"""
Custom exception hierarchy for the job catalog client.

All errors raised by the client inherit from JobCatalogError so the
orchestration layer can catch them at a single boundary and turn them into
operation state instead of letting them escape to callers.

Exception Hierarchy:
    JobCatalogError (base)
    ├── ValidationError
    ├── TransportError
    └── AuthRequiredError

Usage:
    from exceptions import TransportError

    # Raise with simple message
    raise TransportError("Catalog request timed out")

    # Raise with detail dict and upstream status
    raise TransportError("Bad gateway", detail={"path": "/jobs/search"}, status_code=502)

    # Catch at the orchestrator boundary
    try:
        page = await client.search(query)
    except JobCatalogError as e:
        state.fail(e.message)
"""

from typing import Optional, Dict, Any


class JobCatalogError(Exception):
    """
    Base exception for all job catalog client errors.

    Attributes:
        message: Human-readable error message
        detail: Optional dict with additional error context
        status_code: HTTP status returned by the server, when there was one
    """

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for JSON serialization."""
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.detail:
            result["detail"] = self.detail
        return result


class ValidationError(JobCatalogError):
    """
    Raised when user input cannot form a valid request.

    Filter input is normally repaired by the query builder; this is raised only
    for values no request can be built from, and never reaches the network.

    Examples:
        raise ValidationError("Job title is required")
        raise ValidationError("Invalid page size", detail={"field": "size"})
    """

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message, detail=detail)


class TransportError(JobCatalogError):
    """
    Raised when a catalog request fails on the wire or the server rejects it.

    Examples:
        raise TransportError("Connection refused")
        raise TransportError("Server error", status_code=503)
    """

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
    ):
        if path and detail is None:
            detail = {"path": path}
        elif path and detail:
            detail["path"] = path

        super().__init__(message, detail=detail, status_code=status_code)


class AuthRequiredError(TransportError):
    """
    Raised when ingestion is attempted without a credential the server accepts.

    Examples:
        raise AuthRequiredError("Login required to fetch new jobs", status_code=401)
    """

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = 401,
        path: Optional[str] = None,
    ):
        super().__init__(message, detail=detail, status_code=status_code, path=path)
