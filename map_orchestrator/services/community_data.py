"""Dubai communities and real estate projects dataset."""

from typing import Optional

from map_orchestrator.models.map_models import GeoPoint

COMMUNITIES = {
    "dubai hills estate": {"lat": 25.1118, "lng": 55.2575},
    "palm jumeirah": {"lat": 25.1189, "lng": 55.1383},
    "downtown dubai": {"lat": 25.1972, "lng": 55.2744},
    "dubai marina": {"lat": 25.0784, "lng": 55.1384},
    "arabian ranches": {"lat": 25.0683, "lng": 55.2515},
}

PROJECTS = {
    "dubai hills estate": [
        {"name": "Maple at Dubai Hills", "type": "Villas", "lat": 25.1050, "lng": 55.2600},
        {"name": "Park Heights", "type": "Apartments", "lat": 25.1150, "lng": 55.2550},
        {"name": "Golfville", "type": "Off-plan", "lat": 25.1100, "lng": 55.2590},
    ],
    "downtown dubai": [
        {"name": "Burj Khalifa Residences", "type": "Apartments", "lat": 25.1972, "lng": 55.2744},
        {"name": "The Address Downtown", "type": "Apartments", "lat": 25.1945, "lng": 55.2787},
        {"name": "Grande Opera District", "type": "Off-plan", "lat": 25.1930, "lng": 55.2760},
    ],
    "palm jumeirah": [
        {"name": "The Palm Tower", "type": "Apartments", "lat": 25.1118, "lng": 55.1495},
        {"name": "XXII Carat", "type": "Villas", "lat": 25.1025, "lng": 55.1275},
    ],
    "dubai marina": [
        {"name": "Marina Gate", "type": "Apartments", "lat": 25.0870, "lng": 55.1470},
        {"name": "Address Beach Resort", "type": "Apartments", "lat": 25.0780, "lng": 55.1330},
    ],
}

# Named in the apology when a community is unknown.
EXAMPLE_COMMUNITIES = ("Dubai Hills Estate", "Downtown Dubai")


def get_community(name: str) -> Optional[GeoPoint]:
    """
    Look up a community's coordinate.

    Args:
        name: Community name, matched case-insensitively

    Returns:
        The community's coordinate, None if unknown
    """
    coord = COMMUNITIES.get(name.lower())
    if coord is None:
        return None
    return GeoPoint(coord["lat"], coord["lng"])


def get_projects(community_name: str) -> Optional[list[dict]]:
    """Projects in a community, None when there is no data for it."""
    return PROJECTS.get(community_name.lower())


def filter_projects(projects: list[dict], project_type: str) -> list[dict]:
    """Projects whose type contains ``project_type``, ignoring case."""
    wanted = project_type.lower()
    return [p for p in projects if wanted in p["type"].lower()]
