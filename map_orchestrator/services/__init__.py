"""
Services package
- Map state store and its reactive binding to the map controller
- Camera framing
- Grounding resolution
- Capability clients (places, elevation, grounded search, map command buffer)
"""

from .map_state import MapStateStore
from .capabilities import (
    CapabilitySet,
    MapPrimitive,
    PlacesCapability,
    ElevationCapability,
    GroundedSearchCapability,
)
from .framing import FramingConfig, compute_camera_frame, haversine_distance
from .map_controller import MapController, MapStateBinding
from .map_commands import MapCommandBuffer
from .grounding_resolver import GroundingResolver, resolve_markers, apply_markers
from .maps_client import GooglePlacesClient, GoogleElevationClient, MapsGroundingClient

__all__ = [
    "MapStateStore",
    "CapabilitySet",
    "MapPrimitive",
    "PlacesCapability",
    "ElevationCapability",
    "GroundedSearchCapability",
    "FramingConfig",
    "compute_camera_frame",
    "haversine_distance",
    "MapController",
    "MapStateBinding",
    "MapCommandBuffer",
    "GroundingResolver",
    "resolve_markers",
    "apply_markers",
    "GooglePlacesClient",
    "GoogleElevationClient",
    "MapsGroundingClient",
]
