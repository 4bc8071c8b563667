"""
Dependency injection setup for FastAPI.
Provides the service container that owns the map state store, the map state
binding, the capability set and the tool dispatcher.
"""

from fastapi import Request
from typing import Any, Optional
import logging
import asyncio

from map_orchestrator.config.settings import Settings, get_settings
from map_orchestrator.models.map_models import Padding
from map_orchestrator.models.tool_models import FunctionCall, FunctionResponse
from map_orchestrator.services import (
    CapabilitySet,
    FramingConfig,
    GoogleElevationClient,
    GooglePlacesClient,
    MapCommandBuffer,
    MapStateBinding,
    MapStateStore,
    MapsGroundingClient,
)
from map_orchestrator.tools import GroundingHold, ResolutionTaskGroup, ToolContext, ToolDispatcher


logger = logging.getLogger(__name__)

SHUTDOWN_GRACE_SECONDS = 5.0


class ServiceContainer:
    """
    Container for the orchestration services with lifecycle management.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._store: Optional[MapStateStore] = None
        self._binding: Optional[MapStateBinding] = None
        self._command_buffer: Optional[MapCommandBuffer] = None
        self._dispatcher: Optional[ToolDispatcher] = None
        self._grounding_hold: Optional[GroundingHold] = None
        self._tasks: Optional[ResolutionTaskGroup] = None
        self._capabilities = CapabilitySet()
        self._initialized = False
        self._initialization_lock = asyncio.Lock()

    async def initialize_services(self, capabilities: Optional[CapabilitySet] = None) -> None:
        """
        Initialize all services in dependency order.

        Args:
            capabilities: Capability set to start with; built from settings
                when omitted
        """
        async with self._initialization_lock:
            if self._initialized:
                return

            logger.info("Initializing service container")

            framing = self.settings.framing
            self._store = MapStateStore()
            self._command_buffer = MapCommandBuffer()
            self._binding = MapStateBinding(
                self._store,
                padding=Padding.from_sequence(framing.default_padding),
                framing_config=FramingConfig.from_settings(framing),
                fly_duration_ms=framing.fly_duration_ms,
            )
            self._grounding_hold = GroundingHold()
            self._tasks = ResolutionTaskGroup()
            self._dispatcher = ToolDispatcher()
            self._initialized = True

            capabilities = capabilities or self._build_capabilities()
            if capabilities.map is None:
                # The command buffer is the map primitive the HTTP renderer drains.
                capabilities = capabilities.with_capability("map", self._command_buffer)
            self.set_capabilities(capabilities)
            logger.info("Service container initialization completed")

    def _build_capabilities(self) -> CapabilitySet:
        capabilities = CapabilitySet(map=self._command_buffer)

        maps_settings = self.settings.google_maps
        if maps_settings.api_key:
            capabilities = capabilities.with_capability("places", GooglePlacesClient(
                api_key=maps_settings.api_key,
                base_url=maps_settings.places_url,
                timeout=maps_settings.timeout_seconds,
            )).with_capability("elevation", GoogleElevationClient(
                api_key=maps_settings.api_key,
                base_url=maps_settings.elevation_url,
                timeout=maps_settings.timeout_seconds,
            ))
        else:
            logger.warning("GOOGLE_MAPS_API_KEY not set, places and elevation lookups disabled")

        grounding_settings = self.settings.grounding
        if grounding_settings.api_key:
            capabilities = capabilities.with_capability("grounding", MapsGroundingClient(
                api_key=grounding_settings.api_key,
                model_name=grounding_settings.model_name,
                base_url=grounding_settings.api_url,
                timeout=grounding_settings.timeout_seconds,
                default_system_instruction=grounding_settings.default_system_instruction,
            ))
        else:
            logger.warning("GROUNDING_API_KEY not set, maps grounding disabled")

        return capabilities

    async def cleanup_services(self) -> None:
        """
        Detach the map and let outstanding resolution tasks finish.
        """
        logger.info("Cleaning up service container")

        try:
            if self._binding:
                self._binding.close()

            if self._tasks and self._tasks.pending:
                try:
                    await asyncio.wait_for(self._tasks.wait(), timeout=SHUTDOWN_GRACE_SECONDS)
                except asyncio.TimeoutError:
                    logger.warning(f"{self._tasks.pending} resolution tasks still running at shutdown")

            self._dispatcher = None
            self._binding = None
            self._store = None
            self._command_buffer = None
            self._grounding_hold = None
            self._tasks = None
            self._capabilities = CapabilitySet()

            logger.info("Service container cleanup completed")

        except Exception as e:
            logger.error(f"Service container cleanup failed: {e}", exc_info=True)
        finally:
            self._initialized = False

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Service container not initialized")

    @property
    def capabilities(self) -> CapabilitySet:
        return self._capabilities

    def set_capabilities(self, capabilities: CapabilitySet) -> None:
        """Swap the capability set and rebuild the map controller for it."""
        self._require_initialized()
        self._capabilities = capabilities
        self._binding.bind(capabilities)

    def add_capability(self, name: str, handle: Any) -> None:
        self.set_capabilities(self._capabilities.with_capability(name, handle))

    def get_store(self) -> MapStateStore:
        self._require_initialized()
        return self._store

    def get_binding(self) -> MapStateBinding:
        self._require_initialized()
        return self._binding

    def get_command_buffer(self) -> MapCommandBuffer:
        self._require_initialized()
        return self._command_buffer

    def get_dispatcher(self) -> ToolDispatcher:
        self._require_initialized()
        return self._dispatcher

    def get_grounding_hold(self) -> GroundingHold:
        self._require_initialized()
        return self._grounding_hold

    def get_tasks(self) -> ResolutionTaskGroup:
        self._require_initialized()
        return self._tasks

    def build_tool_context(self) -> ToolContext:
        """Snapshot of the current resources for one tool call."""
        self._require_initialized()
        return ToolContext(
            store=self._store,
            capabilities=self._capabilities,
            padding=self._binding.padding,
            set_held_grounded_response=self._grounding_hold.set_response,
            set_held_grounding_chunks=self._grounding_hold.set_chunks,
            tasks=self._tasks,
            discard_stale_resolutions=self.settings.orchestration.discard_stale_resolutions,
        )

    async def handle_function_call(self, call: FunctionCall) -> FunctionResponse:
        self._require_initialized()
        return await self._dispatcher.respond(call, self.build_tool_context())

    def reset_session(self) -> None:
        """Clear map state and held grounding data between sessions."""
        self._require_initialized()
        self._store.reset()
        self._grounding_hold.set_response(None)
        self._grounding_hold.set_chunks(None)


def get_service_container(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the application's service container."""
    container = getattr(request.app.state, "service_container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container
