import asyncio

import pytest

from conftest import FakeElevation
from map_orchestrator.core.exceptions import CapabilityUnavailableError
from map_orchestrator.models.map_models import CameraTarget, GeoPoint, MapMarker, Padding
from map_orchestrator.services.capabilities import CapabilitySet, MapPrimitive
from map_orchestrator.services.map_commands import MapCommandBuffer
from map_orchestrator.services.map_controller import MapController

MARKERS = [
    MapMarker(GeoPoint(25.1050, 55.2600, 1.0), "Maple at Dubai Hills"),
    MapMarker(GeoPoint(25.1150, 55.2550, 1.0), "Park Heights"),
]


def _types(commands):
    return [c["type"] for c in commands]


def test_controller_requires_map():
    with pytest.raises(CapabilityUnavailableError):
        MapController(CapabilitySet())


def test_camera_target_is_applied_once(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))
    target = CameraTarget(GeoPoint(25.1118, 55.2575, 2000), range=10000, tilt=30)

    store.set_camera_target(target)

    commands = command_buffer.drain()
    assert _types(commands) == ["flyCameraTo"]
    assert commands[0]["camera"]["range"] == 10000
    assert store.get_state().camera_target is None

    assert binding.apply_pending_camera_target() is False
    assert command_buffer.drain() == []


@pytest.mark.asyncio
async def test_marker_change_redraws_and_frames(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))

    store.set_markers(MARKERS)
    await binding.wait_idle()

    commands = command_buffer.drain()
    assert _types(commands) == ["addMarker", "addMarker", "flyCameraTo"]
    assert [m.label for m in command_buffer.markers] == ["Maple at Dubai Hills", "Park Heights"]

    store.clear_markers()
    await binding.wait_idle()
    assert _types(command_buffer.drain()) == ["removeMarker", "removeMarker"]
    assert command_buffer.markers == []


@pytest.mark.asyncio
async def test_close_up_update_skips_auto_frame(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))
    close_up = CameraTarget(GeoPoint(25.1050, 55.2600, 200), range=500, tilt=60)

    store.apply(prevent_auto_frame=True, markers=MARKERS[:1], camera_target=close_up)
    await binding.wait_idle()

    commands = command_buffer.drain()
    assert _types(commands) == ["addMarker", "flyCameraTo"]
    assert commands[1]["camera"]["range"] == 500
    state = store.get_state()
    assert state.camera_target is None
    assert state.prevent_auto_frame is False


@pytest.mark.asyncio
async def test_framing_uses_elevation(store, binding, command_buffer):
    elevation = FakeElevation([30.0, 50.0])
    binding.bind(CapabilitySet(map=command_buffer, elevation=elevation))

    store.set_markers(MARKERS)
    await binding.wait_idle()

    fly = command_buffer.drain()[-1]
    assert elevation.calls == 1
    assert fly["camera"]["center"]["altitude"] == pytest.approx(250.0)


@pytest.mark.asyncio
async def test_elevation_failure_falls_back_to_default(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer, elevation=FakeElevation(error=RuntimeError("down"))))

    store.set_markers(MARKERS)
    await binding.wait_idle()

    fly = command_buffer.drain()[-1]
    assert fly["type"] == "flyCameraTo"
    assert fly["camera"]["center"]["altitude"] == pytest.approx(200.0)


def test_pending_target_waits_for_map(store, binding, command_buffer):
    assert binding.bind(CapabilitySet()) is None
    store.set_camera_target(CameraTarget(GeoPoint(25.0, 55.0), range=1000))
    assert store.get_state().camera_target is not None

    binding.bind(CapabilitySet(map=command_buffer))

    assert _types(command_buffer.drain()) == ["flyCameraTo"]
    assert store.get_state().camera_target is None


@pytest.mark.asyncio
async def test_rebind_moves_markers_to_new_map(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))
    store.set_markers(MARKERS)
    await binding.wait_idle()

    replacement = MapCommandBuffer()
    binding.bind(CapabilitySet(map=replacement))
    await binding.wait_idle()

    assert len(replacement.markers) == 2
    assert "addMarker" in _types(replacement.drain())


@pytest.mark.asyncio
async def test_rebind_same_map_does_not_duplicate_markers(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))
    store.set_markers(MARKERS)
    await binding.wait_idle()

    binding.bind(CapabilitySet(map=command_buffer, elevation=FakeElevation([1.0, 2.0])))
    await binding.wait_idle()

    assert len(command_buffer.markers) == 2


@pytest.mark.asyncio
async def test_padding_change_reframes(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))
    store.set_markers(MARKERS)
    await binding.wait_idle()
    first = command_buffer.drain()[-1]["camera"]["range"]

    binding.set_padding(Padding(0.05, 0.05, 0.05, 0.6))
    await binding.wait_idle()

    second = command_buffer.drain()[-1]["camera"]["range"]
    assert second >= first


@pytest.mark.asyncio
async def test_frame_entities_without_points():
    controller = MapController(CapabilitySet(map=MapCommandBuffer()))
    assert await controller.frame_entities([], Padding()) is None


@pytest.mark.asyncio
async def test_frame_entities_flies_to_computed_frame(command_buffer):
    controller = MapController(CapabilitySet(map=command_buffer))
    points = [m.position for m in MARKERS]

    narrow = await controller.frame_entities(points, Padding(0.05, 0.05, 0.05, 0.05))
    wide = await controller.frame_entities(points, Padding(0.05, 0.05, 0.05, 0.6))

    flights = command_buffer.drain()
    assert _types(flights) == ["flyCameraTo", "flyCameraTo"]
    assert flights[1]["camera"]["range"] == pytest.approx(wide.range)
    assert wide.range >= narrow.range


def test_command_buffer_is_a_map_primitive():
    assert isinstance(MapCommandBuffer(), MapPrimitive)


def test_command_buffer_keeps_newest_commands():
    buffer = MapCommandBuffer(max_commands=2)
    for label in ("a", "b", "c"):
        buffer.add_marker(MapMarker(GeoPoint(25.0, 55.0), label))

    commands = buffer.drain()
    assert [c["marker"]["label"] for c in commands] == ["b", "c"]
    assert buffer.drain() == []
    assert len(buffer.markers) == 3


def test_removing_unknown_marker_is_ignored(command_buffer):
    command_buffer.remove_marker(99)
    assert command_buffer.drain() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("clear_markers", [False, True])
async def test_pending_auto_frame_yields_to_later_camera_target(store, binding, command_buffer, clear_markers):
    gate = asyncio.Event()
    binding.bind(CapabilitySet(map=command_buffer, elevation=FakeElevation([1.0, 2.0], gate=gate)))
    community = CameraTarget(GeoPoint(25.1118, 55.2575, 2000), range=10000, tilt=30)

    store.set_markers(MARKERS)
    if clear_markers:
        store.clear_markers()
    store.set_camera_target(community)
    gate.set()
    await binding.wait_idle()

    flights = [c for c in command_buffer.drain() if c["type"] == "flyCameraTo"]
    assert len(flights) == 1
    assert flights[0]["camera"]["range"] == 10000


@pytest.mark.asyncio
async def test_pending_auto_frame_yields_to_newer_markers(store, binding, command_buffer):
    gate = asyncio.Event()
    elevation = FakeElevation([1.0, 2.0], gate=gate)
    binding.bind(CapabilitySet(map=command_buffer, elevation=elevation))

    store.set_markers(MARKERS)
    store.set_markers(MARKERS[:1])
    gate.set()
    await binding.wait_idle()

    flights = [c for c in command_buffer.drain() if c["type"] == "flyCameraTo"]
    assert elevation.calls == 2
    assert len(flights) == 1
    assert flights[0]["camera"]["range"] == 500


def test_later_listener_sees_target_before_it_is_cleared(store, binding, command_buffer):
    binding.bind(CapabilitySet(map=command_buffer))
    target = CameraTarget(GeoPoint(25.1118, 55.2575, 2000), range=10000, tilt=30)
    seen = []
    store.subscribe(lambda state, previous: seen.append(state.camera_target))

    store.set_camera_target(target)

    assert seen == [target, None]
    assert _types(command_buffer.drain()) == ["flyCameraTo"]
