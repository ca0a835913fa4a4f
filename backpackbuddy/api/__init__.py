"""BackpackBuddy API layer: routes, schemas and middleware."""

from backpackbuddy.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    status_for_error,
)
from backpackbuddy.api.routes import router
from backpackbuddy.api.schemas import ErrorResponse, HealthResponse

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "status_for_error",
    "router",
    "ErrorResponse",
    "HealthResponse",
]
