import json

import pytest
from fastapi.testclient import TestClient

import src.api.main as api_main
import src.api.routes as routes
from src.api.routes import get_county_dataset
from src.ingest.county_data import CountyDataset


@pytest.fixture
def client(sample_counties):
    dataset = CountyDataset(sample_counties)
    api_main.app.dependency_overrides[get_county_dataset] = lambda: dataset
    yield TestClient(api_main.app)
    api_main.app.dependency_overrides.clear()


def test_root_endpoint():
    client = TestClient(api_main.app)
    resp = client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert "name" in body
    assert "version" in body
    assert "counties" in body["endpoints"]


def test_health_endpoint(monkeypatch, sample_counties):
    monkeypatch.setattr(api_main, "get_dataset", lambda: CountyDataset(sample_counties))

    client = TestClient(api_main.app)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_health_endpoint_degraded(monkeypatch):
    def _missing():
        raise FileNotFoundError("counties.json")

    monkeypatch.setattr(api_main, "get_dataset", _missing)

    client = TestClient(api_main.app)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"


def test_dataset_unavailable_returns_503(monkeypatch):
    def _missing():
        raise FileNotFoundError("counties.json")

    monkeypatch.setattr(routes, "get_dataset", _missing)

    client = TestClient(api_main.app)
    resp = client.get("/api/v1/counties")
    assert resp.status_code == 503


def test_list_counties(client):
    resp = client.get("/api/v1/counties")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 5
    assert body[0]["id"] == "01001"
    assert body[0]["medianAge"] == 38.6
    assert body[0]["rent"]["medianRent"] == 922


def test_search_counties(client):
    resp = client.get("/api/v1/counties/search", params={"q": "cook"})
    assert resp.status_code == 200
    assert resp.json() == [{"id": "17031", "name": "Cook County", "state": "Illinois"}]


def test_search_limit(client):
    resp = client.get("/api/v1/counties/search", params={"q": "county", "limit": 2})
    assert resp.status_code == 200
    assert len(resp.json()) == 2


def test_county_detail(client):
    resp = client.get("/api/v1/counties/1001")
    assert resp.status_code == 200
    body = resp.json()
    assert body["county"]["name"] == "Autauga County"
    assert 0 <= body["cost_of_living"] <= 100
    assert len(body["metrics"]) == 5
    assert all(0 <= m["bucket"] <= 8 for m in body["metrics"])
    assert all(m["color"].startswith("#") for m in body["metrics"])


def test_county_detail_not_found(client):
    resp = client.get("/api/v1/counties/99999")
    assert resp.status_code == 404


def test_statistics(client):
    resp = client.get("/api/v1/statistics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["county_count"] == 5
    assert body["metrics"]["population"]["min"] == 13124
    assert len(body["metrics"]["median_rent"]["quantile_thresholds"]) == 8
    assert "dataset_version" in body


def test_presets():
    client = TestClient(api_main.app)
    resp = client.get("/api/v1/presets")
    assert resp.status_code == 200
    names = [p["name"] for p in resp.json()]
    assert "retirement_paradise" in names


def test_median_preset(client):
    resp = client.get("/api/v1/presets/median")
    assert resp.status_code == 200
    body = resp.json()
    assert body["medians"]["population"] == 2701767
    assert body["params"]["population"] is True
    assert "rent_min" in body["params"]
    assert "population_importance" not in body["params"]


def test_compare(client):
    resp = client.get("/api/v1/compare", params={"ids": "17031,99999,01001"})
    assert resp.status_code == 200
    body = resp.json()
    assert [row["id"] for row in body] == ["17031", "01001"]
    assert "cost_of_living" in body[0]


def test_metric_layer(client):
    resp = client.get("/api/v1/layers/temperature")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 5
    assert all(row["color"].startswith("#") for row in body)


def test_combined_layer_not_served(client):
    resp = client.get("/api/v1/layers/combined")
    assert resp.status_code == 400


def test_unknown_layer(client):
    resp = client.get("/api/v1/layers/crime")
    assert resp.status_code == 404


def test_county_detail_with_named_record_in_export(tmp_path, sample_counties):
    records = [c.model_dump(by_alias=True) for c in sample_counties]
    records[0]["id"] = "AUTAUGA"
    path = tmp_path / "counties.json"
    path.write_text(json.dumps(records + ["oops"]))

    dataset = CountyDataset.from_file(str(path))
    api_main.app.dependency_overrides[get_county_dataset] = lambda: dataset

    try:
        client = TestClient(api_main.app)
        resp = client.get("/api/v1/counties/17031")
        assert resp.status_code == 200
        assert resp.json()["county"]["name"] == "Cook County"

        assert client.get("/api/v1/counties/AUTAUGA").status_code == 404
    finally:
        api_main.app.dependency_overrides.clear()
