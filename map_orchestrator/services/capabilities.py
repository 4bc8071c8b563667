"""
External capabilities consumed by the orchestration layer.

Each capability arrives independently (the map primitive, the places and
elevation lookups, the grounded search backend). ``CapabilitySet`` collects
whatever is currently available so call sites ask one object instead of
checking individual handles.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from map_orchestrator.core.exceptions import CapabilityUnavailableError
from map_orchestrator.models.map_models import CameraTarget, GeoPoint, MapMarker, PlaceDetails
from map_orchestrator.models.tool_models import GroundedResponse


@runtime_checkable
class MapPrimitive(Protocol):
    """The rendered 3D map."""

    def fly_camera_to(self, camera: CameraTarget, duration_ms: int) -> None:
        ...

    def fly_camera_around(self, camera: CameraTarget, duration_ms: int, rounds: int) -> None:
        ...

    def add_marker(self, marker: MapMarker) -> Any:
        """Add a marker element and return a handle for later removal."""
        ...

    def remove_marker(self, handle: Any) -> None:
        ...


class PlacesCapability(Protocol):
    """Place-field lookup by place identifier."""

    async def fetch_fields(self, place_id: str, fields: Sequence[str]) -> PlaceDetails:
        ...


class ElevationCapability(Protocol):
    """Terrain elevation lookup for a batch of points."""

    async def get_elevation_for_locations(self, points: Sequence[GeoPoint]) -> list[float]:
        ...


class GroundedSearchCapability(Protocol):
    """Grounded (maps-backed) answer generation; raises LookupFailure when the backend fails."""

    async def fetch_grounded_response(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        enable_widget: Optional[bool] = None,
    ) -> Optional[GroundedResponse]:
        ...


CAPABILITY_NAMES = ("map", "places", "elevation", "grounding")


@dataclass(frozen=True)
class CapabilitySet:
    """The capabilities available right now; replaced, never mutated."""
    map: Optional[MapPrimitive] = None
    places: Optional[PlacesCapability] = None
    elevation: Optional[ElevationCapability] = None
    grounding: Optional[GroundedSearchCapability] = None

    def has(self, name: str) -> bool:
        return self._get(name) is not None

    def require(self, name: str) -> Any:
        handle = self._get(name)
        if handle is None:
            raise CapabilityUnavailableError(name)
        return handle

    def with_capability(self, name: str, handle: Any) -> CapabilitySet:
        self._check_name(name)
        return replace(self, **{name: handle})

    @property
    def controller_ready(self) -> bool:
        """A map controller can be built once the map primitive is present."""
        return self.map is not None

    def available(self) -> list[str]:
        return [name for name in CAPABILITY_NAMES if self.has(name)]

    def _get(self, name: str) -> Any:
        self._check_name(name)
        return getattr(self, name)

    @staticmethod
    def _check_name(name: str) -> None:
        if name not in CAPABILITY_NAMES:
            raise ValueError(f"Unknown capability: {name}")
