import asyncio
from typing import Optional

import pytest

from map_orchestrator.core.exceptions import LookupFailure, PlaceResolutionError
from map_orchestrator.models.map_models import GeoPoint, PlaceDetails
from map_orchestrator.models.tool_models import GroundedResponse
from map_orchestrator.services.capabilities import CapabilitySet
from map_orchestrator.services.map_commands import MapCommandBuffer
from map_orchestrator.services.map_controller import MapStateBinding
from map_orchestrator.services.map_state import MapStateStore
from map_orchestrator.tools.context import GroundingHold, ResolutionTaskGroup, ToolContext


class FakePlaces:
    """Places lookup answering from a dict; exceptions in the dict are raised."""

    def __init__(self, places: dict, gate: Optional[asyncio.Event] = None):
        self.places = places
        self.gate = gate
        self.requested: list[str] = []

    async def fetch_fields(self, place_id, fields):
        self.requested.append(place_id)
        if self.gate is not None:
            await self.gate.wait()
        result = self.places.get(place_id)
        if result is None:
            raise PlaceResolutionError(place_id, "not found")
        if isinstance(result, Exception):
            raise result
        return result


class FakeElevation:
    def __init__(
        self,
        elevations=None,
        error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.elevations = elevations or []
        self.error = error
        self.gate = gate
        self.calls = 0

    async def get_elevation_for_locations(self, points):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.elevations)


class FakeGrounding:
    def __init__(self, response: Optional[GroundedResponse] = None, fail: bool = False):
        self.response = response
        self.fail = fail
        self.prompts: list[str] = []

    async def fetch_grounded_response(self, prompt, system_instruction=None, enable_widget=None):
        self.prompts.append(prompt)
        if self.fail:
            raise LookupFailure("grounding", "backend unavailable")
        return self.response


def place(place_id: str, lat: float, lng: float, name: str) -> PlaceDetails:
    return PlaceDetails(place_id=place_id, location=GeoPoint(lat, lng, 1.0), display_name=name)


def grounded_response(text: str, chunks: list[dict]) -> GroundedResponse:
    """Build a grounded response from maps chunk dicts (camelCase keys)."""
    return GroundedResponse.model_validate({
        "candidates": [{
            "content": {"role": "model", "parts": [{"text": text}]},
            "groundingMetadata": {"groundingChunks": [{"maps": c} for c in chunks]},
        }]
    })


@pytest.fixture
def store():
    return MapStateStore()


@pytest.fixture
def command_buffer():
    return MapCommandBuffer()


@pytest.fixture
def binding(store):
    b = MapStateBinding(store)
    yield b
    b.close()


@pytest.fixture
def hold():
    return GroundingHold()


@pytest.fixture
def tool_context(store, hold):
    def build(capabilities: Optional[CapabilitySet] = None, discard_stale: bool = True) -> ToolContext:
        return ToolContext(
            store=store,
            capabilities=capabilities or CapabilitySet(),
            set_held_grounded_response=hold.set_response,
            set_held_grounding_chunks=hold.set_chunks,
            tasks=ResolutionTaskGroup(),
            discard_stale_resolutions=discard_stale,
        )
    return build
