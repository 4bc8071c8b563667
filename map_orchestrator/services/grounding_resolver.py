"""
Grounding resolver.

Turns the grounding chunks attached to a grounded answer into map markers by
looking up each referenced place, then applies the markers to the map state
store with either a close-up camera or regular auto-framing.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from map_orchestrator.core.exceptions import ErrorCode
from map_orchestrator.models.map_models import CameraTarget, GeoPoint, MapMarker, PlaceDetails
from map_orchestrator.models.tool_models import GroundingChunk, MarkerBehavior
from map_orchestrator.services.capabilities import PlacesCapability
from map_orchestrator.services.map_state import MapStateStore

logger = logging.getLogger(__name__)

PLACE_FIELDS = ("location", "displayName")
MARKER_ALTITUDE = 1.0

CLOSE_UP_ALTITUDE = 200.0
CLOSE_UP_RANGE = 500.0
CLOSE_UP_TILT = 60.0


def _mentioned(chunk: GroundingChunk, response_text: Optional[str]) -> bool:
    return bool(response_text and chunk.title and chunk.title in response_text)


def select_chunks(
    chunks: Sequence[GroundingChunk],
    response_text: Optional[str],
    marker_behavior: MarkerBehavior,
) -> list[GroundingChunk]:
    """Chunks that should be resolved into markers, in input order."""
    if marker_behavior == MarkerBehavior.NONE or not chunks:
        return []

    selected = [c for c in chunks if c.place_id]
    if marker_behavior == MarkerBehavior.MENTIONED and response_text:
        selected = [c for c in selected if _mentioned(c, response_text)]
    return selected


async def resolve_markers(
    chunks: Sequence[GroundingChunk],
    places: PlacesCapability,
    response_text: Optional[str] = None,
    marker_behavior: MarkerBehavior = MarkerBehavior.MENTIONED,
) -> list[MapMarker]:
    """
    Look up the places referenced by grounding chunks and build markers.

    Lookups run concurrently. A lookup that fails or returns no location is
    dropped; the rest of the batch is kept.

    Args:
        chunks: Grounding chunks from the grounded answer
        places: Places lookup capability
        response_text: The model's answer, used to filter and label places
        marker_behavior: Which places get a marker

    Returns:
        Markers in chunk order
    """
    selected = select_chunks(chunks, response_text, marker_behavior)
    if not selected:
        return []

    results = await asyncio.gather(
        *(places.fetch_fields(chunk.place_id, PLACE_FIELDS) for chunk in selected),
        return_exceptions=True,
    )

    markers: list[MapMarker] = []
    failed = 0
    for chunk, result in zip(selected, results):
        if isinstance(result, BaseException):
            failed += 1
            logger.warning(f"Place lookup failed for {chunk.place_id}: {result}")
            continue
        if not isinstance(result, PlaceDetails) or result.location is None:
            failed += 1
            logger.warning(f"Place {chunk.place_id} has no location, skipping")
            continue

        show_label = True
        if marker_behavior == MarkerBehavior.ALL:
            show_label = _mentioned(chunk, response_text)

        markers.append(MapMarker(
            position=result.location.with_altitude(MARKER_ALTITUDE),
            label=result.display_name or "",
            show_label=show_label,
        ))

    if failed:
        logger.warning(
            f"Resolved {len(markers)} of {len(selected)} places",
            extra={"error_code": ErrorCode.PARTIAL_RESOLUTION_FAILURE.value},
        )
    return markers


def close_up_target(marker: MapMarker) -> CameraTarget:
    position = marker.position
    return CameraTarget(
        center=GeoPoint(position.lat, position.lng, CLOSE_UP_ALTITUDE),
        range=CLOSE_UP_RANGE,
        tilt=CLOSE_UP_TILT,
        heading=0.0,
        roll=0.0,
    )


def marker_update(
    markers: Sequence[MapMarker],
    chunks: Sequence[GroundingChunk],
) -> dict:
    """
    Build the store update for resolved markers.

    A single marker backed by place answer sources gets a close-up camera and
    suppresses auto-framing; anything else is left to auto-framing.
    """
    has_answer_sources = any(c.place_answer_sources for c in chunks)
    if has_answer_sources and len(markers) == 1:
        return {
            "prevent_auto_frame": True,
            "markers": markers,
            "camera_target": close_up_target(markers[0]),
        }
    return {"prevent_auto_frame": False, "markers": markers}


def apply_markers(
    store: MapStateStore,
    markers: Sequence[MapMarker],
    chunks: Sequence[GroundingChunk],
    token: Optional[int] = None,
) -> bool:
    """
    Write resolved markers to the store.

    Args:
        store: Map state store
        markers: Resolved markers
        chunks: The chunks the markers came from
        token: Generation token taken when resolution started; when given,
            the update is dropped if markers were written since

    Returns:
        True if the store was updated
    """
    update = marker_update(markers, chunks)
    if token is None:
        store.apply(**update)
        return True
    return store.commit_if_current(token, **update)


class GroundingResolver:
    """Resolves grounding chunks and writes the markers to a store."""

    def __init__(
        self,
        store: MapStateStore,
        places: PlacesCapability,
        discard_stale: bool = True,
    ):
        self.store = store
        self.places = places
        self.discard_stale = discard_stale

    async def resolve_and_apply(
        self,
        chunks: Sequence[GroundingChunk],
        response_text: Optional[str],
        marker_behavior: MarkerBehavior,
        token: Optional[int] = None,
    ) -> list[MapMarker]:
        if token is None:
            token = self.store.begin_marker_write()
        markers = await resolve_markers(chunks, self.places, response_text, marker_behavior)
        applied = apply_markers(
            self.store,
            markers,
            chunks,
            token=token if self.discard_stale else None,
        )
        if applied:
            logger.info(f"Applied {len(markers)} grounded markers")
        return markers
