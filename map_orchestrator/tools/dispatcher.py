"""
Tool dispatcher - routes model function calls to their handlers.

The set of tools is closed: every ``ToolName`` must have a handler, which is
checked when the dispatcher is built. Function calls are parsed into one of
the tool invocation models before a handler runs, so handlers only ever see
validated arguments.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from map_orchestrator.core.exceptions import ToolValidationError, UnknownToolError
from map_orchestrator.models.tool_models import (
    FunctionCall,
    FunctionResponse,
    GroundedResponse,
    SchedulingPolicy,
    ToolCallSpec,
    ToolName,
    tool_invocation_adapter,
)
from map_orchestrator.tools.context import ToolContext
from map_orchestrator.tools.declarations import TOOL_DECLARATIONS
from map_orchestrator.tools.handlers import TOOL_HANDLERS, ToolHandler, ToolResult

logger = logging.getLogger(__name__)

INVALID_ARGUMENT_MESSAGES = {
    ToolName.LOCATE_COMMUNITY: "Invalid community name provided.",
    ToolName.FIND_PROJECTS: "Invalid community name or project type provided.",
    ToolName.MAPS_GROUNDING: "Invalid query provided.",
}
UNKNOWN_TOOL_MESSAGE = "Sorry, I can't do that yet. I don't have a tool called \"{name}\"."
TOOL_FAILURE_MESSAGE = "Sorry, something went wrong while updating the map."


class ToolDispatcher:
    """Stateless router from function calls to tool handlers."""

    def __init__(
        self,
        handlers: Optional[dict[ToolName, ToolHandler]] = None,
        declarations: Optional[list[ToolCallSpec]] = None,
    ):
        self.handlers = dict(TOOL_HANDLERS if handlers is None else handlers)
        missing = [name.value for name in ToolName if name not in self.handlers]
        if missing:
            raise ValueError(f"No handler registered for tools: {', '.join(missing)}")
        specs = TOOL_DECLARATIONS if declarations is None else declarations
        self.declarations = {spec.name: spec for spec in specs}

    def resolve_name(self, name: str) -> ToolName:
        try:
            tool = ToolName(name)
        except ValueError:
            raise UnknownToolError(name)
        spec = self.declarations.get(tool)
        if spec is not None and not spec.enabled:
            raise UnknownToolError(name)
        return tool

    def parse(self, call: FunctionCall):
        """
        Parse a function call into its tool invocation.

        Raises:
            UnknownToolError: If no enabled tool has that name
            ToolValidationError: If the arguments do not fit the tool
        """
        tool = self.resolve_name(call.name)
        try:
            return tool_invocation_adapter.validate_python({"name": tool.value, "args": call.args})
        except ValidationError as e:
            raise ToolValidationError(
                INVALID_ARGUMENT_MESSAGES[tool],
                details={"tool": tool.value, "errors": [err["msg"] for err in e.errors()]},
            )

    async def dispatch(self, call: FunctionCall, context: ToolContext) -> ToolResult:
        """
        Run the handler for a function call.

        Raises:
            UnknownToolError: If no enabled tool has that name
            ToolValidationError: If the arguments do not fit the tool
        """
        invocation = self.parse(call)
        handler = self.handlers[ToolName(invocation.name)]
        logger.info(f"Executing tool: {call.name}({call.args})", extra={"tool": call.name})
        return await handler(invocation.args, context)

    def scheduling_for(self, name: str) -> SchedulingPolicy:
        try:
            spec = self.declarations.get(ToolName(name))
        except ValueError:
            spec = None
        return spec.scheduling if spec else SchedulingPolicy.INTERRUPT

    async def respond(self, call: FunctionCall, context: ToolContext) -> FunctionResponse:
        """
        Run a function call and build the response for the model runtime.

        Never raises: unknown tools, bad arguments and handler failures all
        become a natural-language result.
        """
        try:
            result = await self.dispatch(call, context)
        except UnknownToolError as e:
            logger.warning(e.message, extra={"tool": call.name, "error_code": e.error_code.value})
            result = UNKNOWN_TOOL_MESSAGE.format(name=call.name)
        except ToolValidationError as e:
            logger.warning(
                f"Invalid arguments for {call.name}: {e.details.get('errors')}",
                extra={"tool": call.name, "error_code": e.error_code.value},
            )
            result = e.message
        except Exception as e:
            logger.error(f"Tool {call.name} execution failed: {e}", exc_info=True)
            result = TOOL_FAILURE_MESSAGE

        payload = result.to_tool_result() if isinstance(result, GroundedResponse) else result
        return FunctionResponse(
            id=call.id,
            name=call.name,
            response={"result": payload},
            scheduling=self.scheduling_for(call.name),
        )
