"""
Shared context handed to every tool handler.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine, Optional

from map_orchestrator.models.map_models import Padding
from map_orchestrator.models.tool_models import GroundedResponse, GroundingChunk
from map_orchestrator.services.capabilities import CapabilitySet
from map_orchestrator.services.map_state import MapStateStore

logger = logging.getLogger(__name__)


class GroundingHold:
    """Holds the latest grounded response and its chunks for the surrounding UI."""

    def __init__(self):
        self.response: Optional[GroundedResponse] = None
        self.chunks: Optional[list[GroundingChunk]] = None

    def set_response(self, response: Optional[GroundedResponse]) -> None:
        self.response = response

    def set_chunks(self, chunks: Optional[list[GroundingChunk]]) -> None:
        self.chunks = chunks

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response.to_tool_result() if self.response else None,
            "groundingChunks": [
                c.model_dump(by_alias=True, exclude_none=True) for c in self.chunks
            ] if self.chunks else [],
        }


class ResolutionTaskGroup:
    """
    Fire-and-forget tasks started by tool handlers.

    Tasks are never cancelled; ``wait()`` lets callers (tests, shutdown) wait
    for outstanding work.
    """

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Background task {task.get_name()} failed: {exc}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


@dataclass
class ToolContext:
    """Resources and setters available to tool handlers."""
    store: MapStateStore
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)
    padding: Padding = field(default_factory=lambda: Padding(0.05, 0.05, 0.05, 0.05))
    set_held_grounded_response: Callable[[Optional[GroundedResponse]], None] = lambda response: None
    set_held_grounding_chunks: Callable[[Optional[list[GroundingChunk]]], None] = lambda chunks: None
    tasks: ResolutionTaskGroup = field(default_factory=ResolutionTaskGroup)
    discard_stale_resolutions: bool = True
