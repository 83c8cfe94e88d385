"""Dashboard exception hierarchy.

Service errors carry the HTTP status they map to at the API boundary.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base exception for all dashboard failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Raised when required fields are missing from a request."""

    status_code = 400


class Unauthorized(DashboardError):
    """Raised when the admin token does not match."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFound(DashboardError):
    """Raised for unknown dataset ids."""

    status_code = 404


class StorageError(DashboardError):
    """Raised when the backing file cannot be read or parsed."""


class ConfigError(DashboardError):
    """Raised for invalid runtime configuration."""


class ApiError(DashboardError):
    """Raised by the HTTP client when the backend answers with ok:false."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
