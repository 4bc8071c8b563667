"""
FastAPI application setup with a lifespan-managed service container.
"""

from fastapi import FastAPI, Request
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from map_orchestrator.config import Settings, get_settings
from map_orchestrator.core.dependencies import ServiceContainer
from map_orchestrator.core.error_handlers import setup_error_handlers
from map_orchestrator.core.logging import configure_logging
from map_orchestrator.services.capabilities import CapabilitySet

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    capabilities: Optional[CapabilitySet] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings; the global settings when omitted
        capabilities: Capability set to start with instead of the clients
            built from settings

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level.value, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")

        container = ServiceContainer(settings)
        try:
            await container.initialize_services(capabilities)
            app.state.service_container = container
            logger.info("Application startup complete")

            yield

        except Exception as e:
            logger.error(f"Application startup failed: {e}", exc_info=True)
            raise

        finally:
            logger.info("Shutting down application")
            await container.cleanup_services()
            logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan
    )

    setup_error_handlers(app)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log requests and responses with timing information."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.info(f"Request {request_id} started: {request.method} {request.url.path}")

        response = await call_next(request)

        processing_time = (time.time() - start_time) * 1000
        logger.info(
            f"Request {request_id} completed: {response.status_code} ({processing_time:.2f}ms)"
        )
        return response

    from map_orchestrator.api import map_router, tool_router
    app.include_router(tool_router)
    app.include_router(map_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Service status and the capabilities currently available."""
        container: Optional[ServiceContainer] = getattr(request.app.state, "service_container", None)
        return {
            "status": "healthy" if container is not None else "starting",
            "service": settings.app_name,
            "version": settings.app_version,
            "capabilities": container.capabilities.available() if container else [],
        }

    return app


app = create_app()
