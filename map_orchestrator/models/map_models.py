"""
Map data model: points, markers, camera targets, viewport padding and the
snapshot held by the map state store.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Iterator, Optional


@dataclass(frozen=True)
class GeoPoint:
    """A geographic position with altitude in metres."""
    lat: float
    lng: float
    altitude: float = 0.0

    def with_altitude(self, altitude: float) -> GeoPoint:
        return replace(self, altitude=altitude)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng, "altitude": self.altitude}

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_altitude: float = 0.0) -> GeoPoint:
        altitude = data.get("altitude")
        return cls(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            altitude=float(altitude) if altitude is not None else default_altitude,
        )


@dataclass(frozen=True)
class MapMarker:
    """A labelled marker on the map."""
    position: GeoPoint
    label: str
    show_label: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "label": self.label,
            "showLabel": self.show_label,
        }


@dataclass(frozen=True)
class CameraTarget:
    """A one-shot camera command."""
    center: GeoPoint
    range: float
    tilt: float = 0.0
    heading: float = 0.0
    roll: float = 0.0

    def __post_init__(self):
        if self.range <= 0:
            raise ValueError(f"Camera range must be positive, got {self.range}")
        if not 0.0 <= self.tilt <= 90.0:
            raise ValueError(f"Camera tilt must be in [0, 90], got {self.tilt}")
        object.__setattr__(self, "heading", self.heading % 360.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": self.center.to_dict(),
            "range": self.range,
            "tilt": self.tilt,
            "heading": self.heading,
            "roll": self.roll,
        }


@dataclass(frozen=True)
class Padding:
    """
    Viewport-fraction insets reserved for overlapping UI.

    Iterates in ``[top, right, bottom, left]`` order.
    """
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __post_init__(self):
        for name in ("top", "right", "bottom", "left"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Padding '{name}' must be in [0, 1), got {value}")

    def __iter__(self) -> Iterator[float]:
        return iter((self.top, self.right, self.bottom, self.left))

    @classmethod
    def from_sequence(cls, values: Iterable[float]) -> Padding:
        values = [float(v) for v in values]
        if len(values) != 4:
            raise ValueError(f"Padding needs 4 insets, got {len(values)}")
        return cls(*values)

    def to_list(self) -> list[float]:
        return list(self)


@dataclass(frozen=True)
class MapState:
    """Immutable snapshot of the map state store."""
    markers: tuple[MapMarker, ...] = ()
    camera_target: Optional[CameraTarget] = None
    prevent_auto_frame: bool = False
    # Incremented on every marker-set write.
    generation: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "markers": [m.to_dict() for m in self.markers],
            "cameraTarget": self.camera_target.to_dict() if self.camera_target else None,
            "preventAutoFrame": self.prevent_auto_frame,
            "generation": self.generation,
        }


@dataclass
class PlaceDetails:
    """Result of a place-field lookup."""
    place_id: str
    location: Optional[GeoPoint] = None
    display_name: str = ""
    raw: dict[str, Any] = field(default_factory=dict)
