"""
Tools package
- Tool declarations for the model runtime
- Tool handlers and the dispatcher that routes function calls to them
"""

from .context import ToolContext, GroundingHold, ResolutionTaskGroup
from .declarations import TOOL_DECLARATIONS, enabled_declarations
from .handlers import (
    locate_community,
    find_projects,
    maps_grounding,
    TOOL_HANDLERS,
    GROUNDING_FAILURE_MESSAGE,
)
from .dispatcher import ToolDispatcher

__all__ = [
    "ToolContext",
    "GroundingHold",
    "ResolutionTaskGroup",
    "TOOL_DECLARATIONS",
    "enabled_declarations",
    "locate_community",
    "find_projects",
    "maps_grounding",
    "TOOL_HANDLERS",
    "GROUNDING_FAILURE_MESSAGE",
    "ToolDispatcher",
]
