"""
Map controller and its reactive binding to the map state store.

``MapController`` is an imperative facade over the map primitive. It is
rebuilt whenever the capability set changes; a controller is never repaired
in place.

``MapStateBinding`` subscribes to the store and keeps the map in step with it:
marker changes clear and redraw the map and, unless auto-framing is
suppressed, frame all markers; a pending camera target is flown to and then
cleared together with the suppression flag.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from map_orchestrator.models.map_models import CameraTarget, GeoPoint, MapMarker, MapState, Padding
from map_orchestrator.services.capabilities import CapabilitySet
from map_orchestrator.services.framing import FramingConfig, compute_camera_frame
from map_orchestrator.services.map_state import MapStateStore

logger = logging.getLogger(__name__)

DEFAULT_FLY_DURATION_MS = 1500


class MapController:
    """Imperative operations on the map primitive."""

    def __init__(
        self,
        capabilities: CapabilitySet,
        framing_config: Optional[FramingConfig] = None,
        fly_duration_ms: int = DEFAULT_FLY_DURATION_MS,
    ):
        self.map = capabilities.require("map")
        self.elevation = capabilities.elevation
        self.framing_config = framing_config or FramingConfig()
        self.fly_duration_ms = fly_duration_ms
        self._marker_handles: list = []

    def clear_map(self) -> None:
        for handle in self._marker_handles:
            self.map.remove_marker(handle)
        self._marker_handles = []

    def add_markers(self, markers: Sequence[MapMarker]) -> None:
        for marker in markers:
            self._marker_handles.append(self.map.add_marker(marker))

    def fly_to(self, target: CameraTarget) -> None:
        self.map.fly_camera_to(target, self.fly_duration_ms)

    async def frame_entities(
        self,
        points: Sequence[GeoPoint],
        padding: Padding,
    ) -> Optional[CameraTarget]:
        """
        Fly the camera so every point is visible inside the padded viewport.

        Returns:
            The camera target flown to, or None for an empty point list
        """
        target = await self.compute_frame(points, padding)
        if target is not None:
            self.fly_to(target)
        return target

    async def compute_frame(
        self,
        points: Sequence[GeoPoint],
        padding: Padding,
    ) -> Optional[CameraTarget]:
        """Camera target framing ``points``, without moving the camera."""
        if not points:
            return None
        elevations = await self._query_elevations(points)
        return compute_camera_frame(points, padding, elevations, self.framing_config)

    async def _query_elevations(self, points: Sequence[GeoPoint]) -> list[float]:
        if self.elevation is None:
            logger.warning("Elevation capability unavailable, framing at default elevation")
            return []
        try:
            elevations = await self.elevation.get_elevation_for_locations(points)
        except Exception as e:
            logger.warning(f"Elevation lookup failed, framing at default elevation: {e}")
            return []
        if not elevations:
            logger.warning("Elevation lookup returned no results, framing at default elevation")
            return []
        return list(elevations)


class MapStateBinding:
    """Applies map state changes to the current map controller."""

    def __init__(
        self,
        store: MapStateStore,
        padding: Optional[Padding] = None,
        framing_config: Optional[FramingConfig] = None,
        fly_duration_ms: int = DEFAULT_FLY_DURATION_MS,
    ):
        self.store = store
        self.padding = padding or Padding(0.05, 0.05, 0.05, 0.05)
        self.framing_config = framing_config or FramingConfig()
        self.fly_duration_ms = fly_duration_ms
        self.controller: Optional[MapController] = None
        self._tasks: set[asyncio.Task] = set()
        # Bumped whenever markers or the camera change; older framing results are dropped.
        self._frame_epoch = 0
        self._unsubscribe = store.subscribe(self._on_state_change)

    def bind(self, capabilities: CapabilitySet) -> Optional[MapController]:
        """
        Replace the controller for a new capability set.

        The new controller redraws the current markers and applies any camera
        target that was set while no controller was available.
        """
        previous = self.controller
        if previous is not None and previous.map is capabilities.map:
            previous.clear_map()

        if not capabilities.controller_ready:
            logger.warning("Map primitive unavailable, map controller not created")
            self.controller = None
            return None

        self.controller = MapController(
            capabilities,
            framing_config=self.framing_config,
            fly_duration_ms=self.fly_duration_ms,
        )
        logger.info(f"Map controller bound with capabilities {capabilities.available()}")

        state = self.store.get_state()
        self._sync_markers(state)
        self.apply_pending_camera_target()
        return self.controller

    def set_padding(self, padding: Padding) -> None:
        """Update the viewport padding and re-frame the current markers."""
        if padding == self.padding:
            return
        self.padding = padding
        state = self.store.get_state()
        if self.controller is not None and state.markers and not state.prevent_auto_frame:
            self._schedule_frame(self.controller, [m.position for m in state.markers])

    def apply_pending_camera_target(self) -> bool:
        """
        Fly to the pending camera target, then clear it.

        Returns:
            True if a target was applied
        """
        target = self.store.get_state().camera_target
        if target is None or self.controller is None:
            return False
        self._frame_epoch += 1
        self.controller.fly_to(target)
        self.store.apply(camera_target=None, prevent_auto_frame=False)
        return True

    async def wait_idle(self) -> None:
        """Wait for every scheduled framing task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        self._unsubscribe()
        self.controller = None

    def _on_state_change(self, state: MapState, previous: MapState) -> None:
        if self.controller is None:
            return
        if state.generation != previous.generation:
            self._sync_markers(state)
        if state.camera_target is not None and state.camera_target is not previous.camera_target:
            self.apply_pending_camera_target()

    def _sync_markers(self, state: MapState) -> None:
        controller = self.controller
        self._frame_epoch += 1
        controller.clear_map()
        if not state.markers:
            return
        controller.add_markers(state.markers)
        if not state.prevent_auto_frame:
            self._schedule_frame(controller, [m.position for m in state.markers])

    def _schedule_frame(self, controller: MapController, points: list[GeoPoint]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, skipping auto-frame")
            return
        self._frame_epoch += 1
        task = loop.create_task(self._frame(controller, points, self.padding, self._frame_epoch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _frame(
        self,
        controller: MapController,
        points: list[GeoPoint],
        padding: Padding,
        epoch: int,
    ) -> None:
        try:
            target = await controller.compute_frame(points, padding)
        except Exception as e:
            logger.error(f"Auto-frame failed: {e}", exc_info=True)
            return
        if target is None:
            return
        if epoch != self._frame_epoch or controller is not self.controller:
            logger.debug("Dropping auto-frame superseded by a later map update")
            return
        controller.fly_to(target)
