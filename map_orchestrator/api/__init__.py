from .tool_endpoints import router as tool_router
from .map_endpoints import router as map_router

__all__ = ["tool_router", "map_router"]
