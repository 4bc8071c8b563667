"""Map endpoints: state snapshot, viewport padding and the renderer command feed."""
import logging
from typing import Any

from fastapi import APIRouter, Depends

from map_orchestrator.core.dependencies import ServiceContainer, get_service_container
from map_orchestrator.models.map_models import Padding
from map_orchestrator.schemas.base import Envelope
from map_orchestrator.schemas.map import MapCommandList, MapStateRead, PaddingUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/map", tags=["map"])


def _state_read(container: ServiceContainer) -> MapStateRead:
    state = container.get_store().get_state().to_dict()
    return MapStateRead(**state, padding=container.get_binding().padding.to_list())


@router.get("/state", response_model=Envelope[MapStateRead])
async def get_map_state(container: ServiceContainer = Depends(get_service_container)):
    return Envelope(status="ok", data=_state_read(container))


@router.put("/padding", response_model=Envelope[MapStateRead])
async def update_padding(
    update: PaddingUpdate,
    container: ServiceContainer = Depends(get_service_container),
):
    """Set the viewport insets left free by overlaid UI; the markers are re-framed."""
    container.get_binding().set_padding(Padding.from_sequence(update.padding))
    logger.info(f"Map padding updated to {update.padding}")
    return Envelope(status="ok", data=_state_read(container))


@router.get("/commands", response_model=Envelope[MapCommandList])
async def drain_commands(container: ServiceContainer = Depends(get_service_container)):
    """Hand the buffered camera and marker commands to the renderer."""
    commands = container.get_command_buffer().drain()
    return Envelope(status="ok", data=MapCommandList(commands=commands))


@router.post("/reset", response_model=Envelope[MapStateRead])
async def reset_map(container: ServiceContainer = Depends(get_service_container)):
    container.reset_session()
    return Envelope(status="ok", data=_state_read(container))


@router.get("/grounding", response_model=Envelope[dict[str, Any]])
async def get_grounding(container: ServiceContainer = Depends(get_service_container)):
    """The grounded response and chunks held for display next to the map."""
    return Envelope(status="ok", data=container.get_grounding_hold().to_dict())
