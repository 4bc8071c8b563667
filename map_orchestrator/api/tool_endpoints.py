"""Tool endpoints: declarations for the model runtime and function call handling."""
import logging
from typing import Any

from fastapi import APIRouter, Depends

from map_orchestrator.core.dependencies import ServiceContainer, get_service_container
from map_orchestrator.models.tool_models import FunctionCall, FunctionResponse
from map_orchestrator.schemas.base import Envelope
from map_orchestrator.tools.declarations import enabled_declarations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("", response_model=Envelope[list[dict[str, Any]]])
async def list_tools():
    """Function declarations of every enabled tool."""
    return Envelope(status="ok", data=enabled_declarations())


@router.post("/call", response_model=Envelope[FunctionResponse])
async def call_tool(
    call: FunctionCall,
    container: ServiceContainer = Depends(get_service_container),
):
    """
    Run one function call from the model runtime.

    Tool failures are reported inside the function response, so this endpoint
    answers with status "ok" whenever the call was well formed.
    """
    response = await container.handle_function_call(call)
    return Envelope(status="ok", data=response)
