"""Map primitive that buffers camera and marker commands for a rendering client."""
import itertools
import logging
from collections import deque
from typing import Any

from map_orchestrator.models.map_models import CameraTarget, MapMarker

logger = logging.getLogger(__name__)


class MapCommandBuffer:
    """
    Records map commands in order; the renderer drains and replays them.

    Also tracks the marker elements currently on the map, keyed by handle.
    """

    def __init__(self, max_commands: int = 1000):
        self.max_commands = max_commands
        self._commands: deque = deque(maxlen=max_commands)
        self._markers: dict[int, MapMarker] = {}
        self._handles = itertools.count(1)

    def fly_camera_to(self, camera: CameraTarget, duration_ms: int) -> None:
        self._push({"type": "flyCameraTo", "camera": camera.to_dict(), "durationMs": duration_ms})

    def fly_camera_around(self, camera: CameraTarget, duration_ms: int, rounds: int) -> None:
        self._push({
            "type": "flyCameraAround",
            "camera": camera.to_dict(),
            "durationMs": duration_ms,
            "rounds": rounds,
        })

    def add_marker(self, marker: MapMarker) -> int:
        handle = next(self._handles)
        self._markers[handle] = marker
        self._push({"type": "addMarker", "handle": handle, "marker": marker.to_dict()})
        return handle

    def remove_marker(self, handle: int) -> None:
        if self._markers.pop(handle, None) is None:
            return
        self._push({"type": "removeMarker", "handle": handle})

    @property
    def markers(self) -> list[MapMarker]:
        return list(self._markers.values())

    def drain(self) -> list[dict[str, Any]]:
        """Return all buffered commands and clear the buffer."""
        commands = list(self._commands)
        self._commands.clear()
        return commands

    def _push(self, command: dict[str, Any]) -> None:
        if len(self._commands) >= self.max_commands:
            dropped = self._commands[0]
            logger.warning(f"Map command buffer full, dropped {dropped['type']}")
        self._commands.append(command)
