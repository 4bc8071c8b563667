"""
Models package
- Map data model (points, markers, camera targets, padding, state snapshots)
- Tool call models (runtime envelope, tool arguments, grounded responses)
"""

from .map_models import (
    GeoPoint,
    MapMarker,
    CameraTarget,
    Padding,
    MapState,
    PlaceDetails,
)
from .tool_models import (
    SchedulingPolicy,
    MarkerBehavior,
    ToolName,
    ToolCallSpec,
    FunctionCall,
    FunctionResponse,
    LocateCommunityArgs,
    FindProjectsArgs,
    MapsGroundingArgs,
    ToolInvocation,
    GroundingChunk,
    GroundedResponse,
)

__all__ = [
    "GeoPoint",
    "MapMarker",
    "CameraTarget",
    "Padding",
    "MapState",
    "PlaceDetails",
    "SchedulingPolicy",
    "MarkerBehavior",
    "ToolName",
    "ToolCallSpec",
    "FunctionCall",
    "FunctionResponse",
    "LocateCommunityArgs",
    "FindProjectsArgs",
    "MapsGroundingArgs",
    "ToolInvocation",
    "GroundingChunk",
    "GroundedResponse",
]
