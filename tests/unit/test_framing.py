import math

import pytest

from map_orchestrator.models.map_models import GeoPoint, Padding
from map_orchestrator.services.framing import (
    FramingConfig,
    compute_camera_frame,
    haversine_distance,
    normalize_elevations,
    visible_fractions,
)

POINTS = [
    GeoPoint(25.1050, 55.2600),
    GeoPoint(25.1150, 55.2550),
    GeoPoint(25.1100, 55.2590),
]


def test_haversine_distance_between_nearby_points():
    dist = haversine_distance(25.1972, 55.2744, 25.1945, 55.2787)
    assert 400 < dist < 600


def test_empty_point_list_has_no_frame():
    assert compute_camera_frame([], Padding()) is None


def test_single_point_uses_close_up():
    target = compute_camera_frame([GeoPoint(25.2, 55.27)], Padding(), elevations=[12.0])
    assert target.range == 500
    assert target.tilt == 60
    assert target.center.lat == 25.2
    assert target.center.altitude == pytest.approx(212.0)


def test_center_is_bounding_box_midpoint_above_highest_terrain():
    target = compute_camera_frame(POINTS, Padding(), elevations=[5.0, 40.0, 10.0])
    assert target.center.lat == pytest.approx((25.1050 + 25.1150) / 2)
    assert target.center.lng == pytest.approx((55.2550 + 55.2600) / 2)
    assert target.center.altitude == pytest.approx(240.0)
    assert target.tilt == 45
    assert target.heading == 0


def test_larger_left_padding_never_shrinks_range():
    ranges = [
        compute_camera_frame(POINTS, Padding(0.05, 0.05, 0.05, left)).range
        for left in (0.0, 0.2, 0.4, 0.6, 0.9)
    ]
    assert ranges == sorted(ranges)
    assert ranges[-1] > ranges[0]


def test_range_is_clamped():
    config = FramingConfig(min_range_m=500.0, max_range_m=10_000.0)
    close = compute_camera_frame([GeoPoint(25.0, 55.0), GeoPoint(25.00001, 55.0)], Padding(), config=config)
    far = compute_camera_frame([GeoPoint(-60.0, -170.0), GeoPoint(60.0, 170.0)], Padding(), config=config)
    assert close.range == 500.0
    assert far.range == 10_000.0


def test_range_follows_field_of_view():
    config = FramingConfig(min_range_m=1.0)
    points = [GeoPoint(25.0, 55.0), GeoPoint(25.0, 55.1)]
    target = compute_camera_frame(points, Padding(), config=config)
    width = haversine_distance(25.0, 55.0, 25.0, 55.1)
    expected = width * 1.2 / (2 * math.tan(math.radians(35.0) / 2))
    assert target.range == pytest.approx(expected)


def test_visible_fraction_has_a_floor():
    w, h = visible_fractions(Padding(0.5, 0.6, 0.5, 0.6))
    assert w == 0.05
    assert h == 0.05


def test_missing_elevations_default_to_zero():
    assert normalize_elevations(POINTS, None) == [0.0, 0.0, 0.0]
    assert normalize_elevations(POINTS, [3.0]) == [3.0, 0.0, 0.0]
