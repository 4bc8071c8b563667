import pytest
from fastapi.testclient import TestClient

from conftest import FakeGrounding, FakePlaces, grounded_response, place
from map_orchestrator.config.settings import Settings
from map_orchestrator.main import create_app
from map_orchestrator.services.capabilities import CapabilitySet

RESPONSE = grounded_response(
    "The Dubai Mall is right next to Burj Khalifa.",
    [
        {"placeId": "places/mall", "title": "The Dubai Mall"},
        {"placeId": "places/burj", "title": "Burj Khalifa"},
    ],
)
PLACES = {
    "places/mall": place("places/mall", 25.1985, 55.2796, "The Dubai Mall"),
    "places/burj": place("places/burj", 25.1972, 55.2744, "Burj Khalifa"),
}


@pytest.fixture
def client():
    capabilities = CapabilitySet(grounding=FakeGrounding(RESPONSE), places=FakePlaces(PLACES))
    app = create_app(Settings(), capabilities=capabilities)
    with TestClient(app) as c:
        yield c


def _call(client, name, args):
    r = client.post("/tools/call", json={"id": "call-1", "name": name, "args": args})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    return body["data"]


def test_health_lists_capabilities(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["capabilities"] == ["map", "places", "grounding"]


def test_list_tools(client):
    r = client.get("/tools")
    names = {d["name"] for d in r.json()["data"]}
    assert names == {"mapsGrounding", "locateCommunity", "findProjects"}


def test_locate_community_flies_camera(client):
    data = _call(client, "locateCommunity", {"communityName": "Dubai Hills Estate"})
    assert data["response"] == {"result": "Located Dubai Hills Estate on the map."}
    assert data["scheduling"] == "INTERRUPT"

    commands = client.get("/map/commands").json()["data"]["commands"]
    assert commands[-1]["type"] == "flyCameraTo"
    assert commands[-1]["camera"]["range"] == 10000

    state = client.get("/map/state").json()["data"]
    assert state["cameraTarget"] is None
    assert state["preventAutoFrame"] is False


def test_find_projects_adds_markers(client):
    data = _call(client, "findProjects", {"communityName": "Downtown Dubai", "projectType": "Off-plan"})
    assert data["response"]["result"] == "Found and marked 1 Off-plan projects in Downtown Dubai."

    state = client.get("/map/state").json()["data"]
    assert [m["label"] for m in state["markers"]] == ["Grande Opera District"]
    commands = client.get("/map/commands").json()["data"]["commands"]
    assert [c["type"] for c in commands][:1] == ["addMarker"]


def test_unknown_tool_answers_with_text(client):
    data = _call(client, "orderPizza", {})
    assert "orderPizza" in data["response"]["result"]


def test_invalid_arguments_answer_with_text(client):
    data = _call(client, "locateCommunity", {})
    assert data["response"]["result"] == "Invalid community name provided."


def test_maps_grounding_holds_response(client):
    data = _call(client, "mapsGrounding", {"query": "shopping downtown"})
    assert data["response"]["result"]["text"].startswith("The Dubai Mall")

    grounding = client.get("/map/grounding").json()["data"]
    assert grounding["response"]["text"] == RESPONSE.text
    assert len(grounding["groundingChunks"]) == 2


def test_padding_update(client):
    r = client.put("/map/padding", json={"padding": [0.1, 0.1, 0.1, 0.4]})
    assert r.status_code == 200
    assert r.json()["data"]["padding"] == [0.1, 0.1, 0.1, 0.4]


def test_invalid_padding_uses_error_envelope(client):
    r = client.put("/map/padding", json={"padding": [0.1, 0.1]})
    assert r.status_code == 422
    body = r.json()
    assert body["status"] == "error"
    assert body["error_code"] == "VALIDATION_ERROR"


def test_reset_clears_markers(client):
    _call(client, "findProjects", {"communityName": "Dubai Marina", "projectType": "Apartments"})
    r = client.post("/map/reset")
    state = r.json()["data"]
    assert state["markers"] == []
    assert client.get("/map/grounding").json()["data"] == {"response": None, "groundingChunks": []}


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/nowhere")
    assert r.status_code == 404
    assert r.json()["error_code"] == "NOT_FOUND"
