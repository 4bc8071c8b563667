"""
Maps service clients - real API implementations of the lookup capabilities.

Uses:
- Places API for place-field lookups (location + display name)
- Elevation API for terrain elevation under framed points
- Generative Language API with the Google Maps tool for grounded answers

The elevation client degrades to an empty result. The places client raises
per-place errors that the resolver collects, and the grounding client raises
LookupFailure, which the mapsGrounding tool turns into a fallback message.
"""

import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError

from map_orchestrator.core.exceptions import LookupFailure, PlaceResolutionError
from map_orchestrator.models.map_models import GeoPoint, PlaceDetails
from map_orchestrator.models.tool_models import GroundedResponse

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

PLACES_API_URL = "https://places.googleapis.com/v1/places"
ELEVATION_API_URL = "https://maps.googleapis.com/maps/api/elevation/json"
GENERATIVE_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"

REQUEST_TIMEOUT = 10.0
PLACE_ID_PREFIX = "places/"
# The elevation API accepts a bounded number of locations per request.
MAX_ELEVATION_BATCH = 512


def normalize_place_id(place_id: str) -> str:
    """Strip the resource prefix the grounding service puts on place ids."""
    if place_id.startswith(PLACE_ID_PREFIX):
        return place_id[len(PLACE_ID_PREFIX):]
    return place_id


# =============================================================================
# Places API - place field lookups
# =============================================================================

class GooglePlacesClient:
    """Places capability backed by the Places API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = PLACES_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch_fields(self, place_id: str, fields: Sequence[str]) -> PlaceDetails:
        """
        Fetch the requested fields of one place.

        Args:
            place_id: Place identifier, with or without the ``places/`` prefix
            fields: Field mask entries, e.g. ``["location", "displayName"]``

        Returns:
            The place details

        Raises:
            PlaceResolutionError: If the request fails
        """
        place_id = normalize_place_id(place_id)
        url = f"{self.base_url}/{place_id}"
        headers = {
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": ",".join(fields),
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException:
                logger.error(f"Places API timeout for {place_id}")
                raise PlaceResolutionError(place_id, "timeout")
            except httpx.HTTPStatusError as e:
                logger.error(f"Places API error for {place_id}: {e}")
                raise PlaceResolutionError(place_id, f"status {e.response.status_code}")
            except httpx.HTTPError as e:
                logger.error(f"Places request failed for {place_id}: {e}")
                raise PlaceResolutionError(place_id, str(e))
            except ValueError:
                logger.error(f"Places API returned invalid JSON for {place_id}")
                raise PlaceResolutionError(place_id, "invalid response")

        return _parse_place(place_id, data)


def _parse_place(place_id: str, data: dict[str, Any]) -> PlaceDetails:
    location = data.get("location") or {}
    display_name = data.get("displayName") or {}
    if isinstance(display_name, dict):
        display_name = display_name.get("text", "")

    position = None
    if "latitude" in location and "longitude" in location:
        position = GeoPoint(
            lat=float(location["latitude"]),
            lng=float(location["longitude"]),
            altitude=1.0,
        )

    return PlaceDetails(
        place_id=place_id,
        location=position,
        display_name=display_name or "",
        raw=data,
    )


# =============================================================================
# Elevation API
# =============================================================================

class GoogleElevationClient:
    """Elevation capability backed by the Elevation API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = ELEVATION_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    async def get_elevation_for_locations(self, points: Sequence[GeoPoint]) -> list[float]:
        """
        Get terrain elevation for every point, in input order.

        Returns an empty list when the service is unavailable so callers can
        fall back to a default elevation.
        """
        if not points:
            return []

        elevations: list[float] = []
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for start in range(0, len(points), MAX_ELEVATION_BATCH):
                batch = points[start:start + MAX_ELEVATION_BATCH]
                params = {
                    "locations": "|".join(f"{p.lat},{p.lng}" for p in batch),
                    "key": self.api_key,
                }
                try:
                    response = await client.get(self.base_url, params=params)
                    response.raise_for_status()
                    data = response.json()

                except httpx.TimeoutException:
                    logger.error("Elevation API timeout")
                    return []
                except httpx.HTTPError as e:
                    logger.error(f"Elevation request failed: {e}")
                    return []
                except ValueError:
                    logger.error("Elevation API returned invalid JSON")
                    return []

                if data.get("status") != "OK":
                    logger.warning(f"Elevation API returned status {data.get('status')}")
                    return []

                elevations.extend(float(r.get("elevation", 0.0)) for r in data.get("results", []))

        return elevations


# =============================================================================
# Maps grounding - grounded answers
# =============================================================================

class MapsGroundingClient:
    """Grounded search capability using the Google Maps grounding tool."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.5-flash",
        base_url: str = GENERATIVE_API_URL,
        timeout: float = 30.0,
        default_system_instruction: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_system_instruction = default_system_instruction
        self.transport = transport

    def build_request(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        enable_widget: Optional[bool] = None,
    ) -> dict[str, Any]:
        """Build the generateContent request body."""
        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"googleMaps": {"enableWidget": bool(enable_widget)}}],
        }
        instruction = system_instruction or self.default_system_instruction
        if instruction:
            body["systemInstruction"] = {"parts": [{"text": instruction}]}
        return body

    async def fetch_grounded_response(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        enable_widget: Optional[bool] = None,
    ) -> GroundedResponse:
        """
        Ask the grounded search backend for an answer.

        Returns:
            The parsed response

        Raises:
            LookupFailure: If the request fails or the response is unusable
        """
        url = f"{self.base_url}/{self.model_name}:generateContent"
        body = self.build_request(prompt, system_instruction, enable_widget)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    url,
                    json=body,
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException:
                logger.error("Maps grounding timeout")
                raise LookupFailure("grounding", "Maps grounding request timed out")
            except httpx.HTTPStatusError as e:
                logger.error(f"Maps grounding API error: {e}")
                raise LookupFailure("grounding", f"Maps grounding returned status {e.response.status_code}")
            except httpx.HTTPError as e:
                logger.error(f"Maps grounding request failed: {e}")
                raise LookupFailure("grounding", str(e))
            except ValueError:
                logger.error("Maps grounding returned invalid JSON")
                raise LookupFailure("grounding", "Maps grounding returned invalid JSON")

        try:
            return GroundedResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"Maps grounding response did not match the expected shape: {e}")
            raise LookupFailure("grounding", "Maps grounding response did not match the expected shape")
