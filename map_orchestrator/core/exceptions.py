"""
Custom exceptions for the map orchestration engine.

None of these reach the model runtime: the tool dispatcher and the grounding
resolver turn them into user-facing strings or logged no-ops.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # Tool dispatch errors
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # External lookup errors
    LOOKUP_FAILED = "LOOKUP_FAILED"
    PARTIAL_RESOLUTION_FAILURE = "PARTIAL_RESOLUTION_FAILURE"
    CAPABILITY_UNAVAILABLE = "CAPABILITY_UNAVAILABLE"

    # Generic errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class MapOrchestrationException(Exception):
    """Base exception for the map orchestration engine."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code


class UnknownToolError(MapOrchestrationException):
    """Raised when the model calls a tool that is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Unknown tool: {tool_name}",
            error_code=ErrorCode.UNKNOWN_TOOL,
            details={"tool_name": tool_name},
            status_code=404
        )
        self.tool_name = tool_name


class ToolValidationError(MapOrchestrationException):
    """Raised when tool arguments are malformed or refer to unknown data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details=details,
            status_code=422
        )


class LookupFailure(MapOrchestrationException):
    """Raised when an external lookup returns no usable response."""

    def __init__(self, service: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Lookup against '{service}' failed",
            error_code=ErrorCode.LOOKUP_FAILED,
            details={"service": service},
            status_code=502
        )


class PlaceResolutionError(MapOrchestrationException):
    """Raised when a single place lookup fails or has no location."""

    def __init__(self, place_id: str, reason: str):
        super().__init__(
            message=f"Could not resolve place '{place_id}': {reason}",
            error_code=ErrorCode.PARTIAL_RESOLUTION_FAILURE,
            details={"place_id": place_id, "reason": reason},
            status_code=502
        )
        self.place_id = place_id


class CapabilityUnavailableError(MapOrchestrationException):
    """Raised when a required capability (places, elevation, map) is missing."""

    def __init__(self, capability: str):
        super().__init__(
            message=f"Capability '{capability}' is not available",
            error_code=ErrorCode.CAPABILITY_UNAVAILABLE,
            details={"capability": capability},
            status_code=503
        )
        self.capability = capability
