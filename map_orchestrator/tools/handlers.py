"""
Tool handlers - one per tool the model can call.

Each handler reads and writes the map state store through its context and
returns either a string or a grounded response for the model. Handlers keep
no state between calls.
"""

import logging
from typing import Awaitable, Callable, Union

from map_orchestrator.core.exceptions import LookupFailure
from map_orchestrator.models.map_models import CameraTarget, MapMarker, GeoPoint
from map_orchestrator.models.tool_models import (
    FindProjectsArgs,
    GroundedResponse,
    LocateCommunityArgs,
    MapsGroundingArgs,
    MarkerBehavior,
    ToolName,
)
from map_orchestrator.services.community_data import (
    EXAMPLE_COMMUNITIES,
    filter_projects,
    get_community,
    get_projects,
)
from map_orchestrator.services.grounding_resolver import GroundingResolver
from map_orchestrator.tools.context import ToolContext

logger = logging.getLogger(__name__)

ToolResult = Union[str, GroundedResponse]
ToolHandler = Callable[..., Awaitable[ToolResult]]

GROUNDING_FAILURE_MESSAGE = "Failed to get a response from maps grounding."

COMMUNITY_ALTITUDE = 2000.0
COMMUNITY_RANGE = 10000.0
COMMUNITY_TILT = 30.0
PROJECT_MARKER_ALTITUDE = 1.0


async def locate_community(args: LocateCommunityArgs, context: ToolContext) -> ToolResult:
    """Fly to a wide establishing shot of a Dubai community."""
    community = get_community(args.community_name)

    if community is None:
        first, second = EXAMPLE_COMMUNITIES
        message = (
            f'Sorry, I couldn\'t find the community "{args.community_name}". '
            f'Please try another, like "{first}" or "{second}".'
        )
        logger.info(f"Unknown community requested: {args.community_name}")
        return message

    # Previous markers belong to another area
    context.store.clear_markers()
    context.store.set_camera_target(CameraTarget(
        center=community.with_altitude(COMMUNITY_ALTITUDE),
        range=COMMUNITY_RANGE,
        tilt=COMMUNITY_TILT,
        heading=0.0,
        roll=0.0,
    ))

    return f"Located {args.community_name} on the map."


async def find_projects(args: FindProjectsArgs, context: ToolContext) -> ToolResult:
    """Mark the real estate projects of one type in a community."""
    projects = get_projects(args.community_name)

    if projects is None:
        return f'I don\'t have project data for "{args.community_name}" right now.'

    matches = filter_projects(projects, args.project_type)

    if not matches:
        return (
            f'I couldn\'t find any "{args.project_type}" projects in '
            f'{args.community_name}. You could try another type.'
        )

    markers = [
        MapMarker(
            position=GeoPoint(p["lat"], p["lng"], PROJECT_MARKER_ALTITUDE),
            label=p["name"],
            show_label=True,
        )
        for p in matches
    ]
    context.store.apply(prevent_auto_frame=False, markers=markers)

    return (
        f"Found and marked {len(matches)} {args.project_type} projects in "
        f"{args.community_name}."
    )


async def maps_grounding(args: MapsGroundingArgs, context: ToolContext) -> ToolResult:
    """
    Answer a place query with grounded search and mark the places on the map.

    The grounded response is returned right away; place lookups for the
    markers run in a background task.
    """
    grounding = context.capabilities.grounding
    if grounding is None:
        logger.warning("Grounded search capability unavailable")
        return GROUNDING_FAILURE_MESSAGE

    try:
        response = await grounding.fetch_grounded_response(
            args.query,
            system_instruction=args.system_instruction,
            enable_widget=args.enable_widget,
        )
    except LookupFailure as e:
        logger.warning(e.message, extra={"tool": ToolName.MAPS_GROUNDING.value, "error_code": e.error_code.value})
        return GROUNDING_FAILURE_MESSAGE
    if response is None:
        return GROUNDING_FAILURE_MESSAGE

    context.set_held_grounded_response(response)
    chunks = response.grounding_chunks
    if not chunks:
        context.store.clear_markers()
        return response
    context.set_held_grounding_chunks(chunks)

    if args.marker_behavior == MarkerBehavior.NONE:
        context.store.clear_markers()
        return response

    places = context.capabilities.places
    if places is None:
        logger.warning("Places capability unavailable, grounded places not marked")
        return response

    resolver = GroundingResolver(
        context.store,
        places,
        discard_stale=context.discard_stale_resolutions,
    )
    token = context.store.begin_marker_write()
    context.tasks.spawn(
        resolver.resolve_and_apply(chunks, response.text, args.marker_behavior, token=token),
        name=f"resolve-markers-{token}",
    )
    return response


TOOL_HANDLERS: dict[ToolName, ToolHandler] = {
    ToolName.MAPS_GROUNDING: maps_grounding,
    ToolName.LOCATE_COMMUNITY: locate_community,
    ToolName.FIND_PROJECTS: find_projects,
}
