"""
Core infrastructure: exceptions, error handlers, logging and the service
container.
"""

from .exceptions import (
    ErrorCode,
    MapOrchestrationException,
    UnknownToolError,
    ToolValidationError,
    LookupFailure,
    PlaceResolutionError,
    CapabilityUnavailableError,
)
from .logging import configure_logging, JsonFormatter

__all__ = [
    "ErrorCode",
    "MapOrchestrationException",
    "UnknownToolError",
    "ToolValidationError",
    "LookupFailure",
    "PlaceResolutionError",
    "CapabilityUnavailableError",
    "configure_logging",
    "JsonFormatter",
]
