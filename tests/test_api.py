import pytest
from fastapi.testclient import TestClient

from main import app, get_config, get_source

from conftest import FakeSource


@pytest.fixture
def client(cfg):
    def use(source):
        app.dependency_overrides[get_source] = lambda: source
        app.dependency_overrides[get_config] = lambda: cfg
        return TestClient(app)

    yield use
    app.dependency_overrides.clear()


def test_health(client):
    resp = client(FakeSource()).get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_presets(client):
    c = client(FakeSource())
    resp = c.get("/api/presets")
    assert resp.status_code == 200
    ids = [p["id"] for p in resp.json()["presets"]]
    assert ids == ["phoenix", "delhi", "paris", "hanoi", "sydney", "manaus"]
    assert c.get("/api/presets/paris").json()["preset"]["name"] == "Paris"
    assert c.get("/api/presets/atlantis").status_code == 404


def test_analyze_weather(client):
    resp = client(FakeSource()).post("/api/analyze-weather", json={
        "lat": 39.7392, "lon": -104.9903, "date": "2024-07-01", "locationName": "Denver",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["query"]["locationName"] == "Denver"
    assert set(body["probabilities"]) == {"hot", "cold", "windy", "wet", "uncomfortable"}


def test_get_weather(client):
    resp = client(FakeSource()).get("/api/weather", params={
        "latitude": -33.8688, "longitude": 151.2093, "datetime": "2024-01-15T00:00:00Z",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["query"]["date"] == "2024-01-15"
    assert "oceanInfluence" in body


@pytest.mark.parametrize("payload", [
    {"lon": 0.0, "date": "2024-07-01"},
    {"lat": 0.0, "lon": 0.0},
    {"lat": 100.0, "lon": 0.0, "date": "2024-07-01"},
    {"lat": 0.0, "lon": 0.0, "date": "July 1st"},
])
def test_invalid_input_is_400(client, payload):
    source = FakeSource()
    resp = client(source).post("/api/analyze-weather", json=payload)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["errorType"] == "invalid_input"
    assert source.land_calls == []


def test_no_data_is_422(client):
    resp = client(FakeSource(land={"T2M": None})).post("/api/analyze-weather", json={
        "lat": 39.7392, "lon": -104.9903, "date": "2024-07-01",
    })
    assert resp.status_code == 422
    assert resp.json()["errorType"] == "no_data"


def test_upstream_unavailable_is_503(client):
    source = FakeSource(login_error=RuntimeError("401 Unauthorized"))
    resp = client(source).post("/api/analyze-weather", json={
        "lat": 39.7392, "lon": -104.9903, "date": "2024-07-01",
    })
    assert resp.status_code == 503
    assert resp.json()["errorType"] == "upstream_unavailable"
