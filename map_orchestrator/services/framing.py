"""
Camera framing for a set of geo points.

Given the points to show, the viewport padding reserved by overlapping UI and
the terrain elevation under each point, compute a camera target that keeps
every point inside the unpadded part of the viewport.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from map_orchestrator.models.map_models import CameraTarget, GeoPoint, Padding

EARTH_RADIUS_M = 6371000
DEFAULT_ELEVATION_M = 0.0

# Single point framing mirrors the close-up used for a single grounded place.
CLOSE_UP_RANGE_M = 500.0
CLOSE_UP_TILT = 60.0

# Smallest visible viewport fraction; keeps the range finite when insets
# leave almost nothing uncovered.
MIN_VISIBLE_FRACTION = 0.05
FRAME_MARGIN = 1.2


@dataclass
class FramingConfig:
    """Tunable parameters of the framing algorithm."""
    field_of_view_deg: float = 35.0
    min_range_m: float = 500.0
    max_range_m: float = 2_000_000.0
    default_tilt: float = 45.0
    altitude_offset_m: float = 200.0

    @classmethod
    def from_settings(cls, framing_settings) -> FramingConfig:
        return cls(
            field_of_view_deg=framing_settings.field_of_view_deg,
            min_range_m=framing_settings.min_range_m,
            max_range_m=framing_settings.max_range_m,
            default_tilt=framing_settings.default_tilt,
            altitude_offset_m=framing_settings.altitude_offset_m,
        )


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate distance between two points in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi, dlam = math.radians(lat2 - lat1), math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(points: Sequence[GeoPoint]) -> tuple[float, float, float, float]:
    """Return ``(min_lat, min_lng, max_lat, max_lng)``."""
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    return min(lats), min(lngs), max(lats), max(lngs)


def visible_fractions(padding: Padding) -> tuple[float, float]:
    """Fraction of the viewport width and height not covered by padding."""
    visible_w = max(MIN_VISIBLE_FRACTION, 1.0 - padding.left - padding.right)
    visible_h = max(MIN_VISIBLE_FRACTION, 1.0 - padding.top - padding.bottom)
    return visible_w, visible_h


def normalize_elevations(
    points: Sequence[GeoPoint],
    elevations: Optional[Sequence[float]],
) -> list[float]:
    """Pair each point with an elevation, defaulting when data is missing."""
    if not elevations:
        return [DEFAULT_ELEVATION_M] * len(points)
    result = []
    for i in range(len(points)):
        value = elevations[i] if i < len(elevations) else None
        result.append(float(value) if value is not None else DEFAULT_ELEVATION_M)
    return result


def compute_camera_frame(
    points: Sequence[GeoPoint],
    padding: Padding,
    elevations: Optional[Sequence[float]] = None,
    config: Optional[FramingConfig] = None,
) -> Optional[CameraTarget]:
    """
    Compute a camera target that frames ``points``.

    Args:
        points: Points to keep in view
        padding: Viewport insets ``[top, right, bottom, left]``
        elevations: Terrain elevation per point; missing values fall back to 0
        config: Framing parameters

    Returns:
        The camera target, or None when there is nothing to frame
    """
    if not points:
        return None
    config = config or FramingConfig()
    terrain = normalize_elevations(points, elevations)
    max_elevation = max(terrain)

    if len(points) == 1:
        point = points[0]
        return CameraTarget(
            center=GeoPoint(point.lat, point.lng, max_elevation + config.altitude_offset_m),
            range=CLOSE_UP_RANGE_M,
            tilt=CLOSE_UP_TILT,
            heading=0.0,
            roll=0.0,
        )

    min_lat, min_lng, max_lat, max_lng = bounding_box(points)
    mid_lat = (min_lat + max_lat) / 2
    mid_lng = (min_lng + max_lng) / 2

    width_m = haversine_distance(mid_lat, min_lng, mid_lat, max_lng)
    height_m = haversine_distance(min_lat, mid_lng, max_lat, mid_lng)

    visible_w, visible_h = visible_fractions(padding)
    extent_m = max(width_m / visible_w, height_m / visible_h)

    half_fov = math.radians(config.field_of_view_deg) / 2
    range_m = extent_m * FRAME_MARGIN / (2 * math.tan(half_fov))
    range_m = min(max(range_m, config.min_range_m), config.max_range_m)

    return CameraTarget(
        center=GeoPoint(mid_lat, mid_lng, max_elevation + config.altitude_offset_m),
        range=range_m,
        tilt=config.default_tilt,
        heading=0.0,
        roll=0.0,
    )
