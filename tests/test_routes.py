"""API tests against the sample catalog through FastAPI's TestClient."""

import json

from drivematch.api.deps import get_llm_advisor
from drivematch.config import Settings, get_settings
from drivematch.main import app
from drivematch.services.llm_advisor import LLMAdvisor
from test_llm_advisor import stub_client


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "drivematch"}


# ---------------------------------------------------------------------------
# Similar vehicles
# ---------------------------------------------------------------------------


class TestSimilarRoute:
    def test_similar(self, client):
        response = client.get("/api/vehicles/similar/v-creta")
        assert response.status_code == 200
        body = response.json()
        assert body["base"]["id"] == "v-creta"
        ids = [v["id"] for v in body["similar"]]
        assert set(ids) == {"v-seltos", "v-verna", "v-city"}
        assert "enginePower" in body["similar"][0]

    def test_unknown_reference(self, client):
        response = client.get("/api/vehicles/similar/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"message": "Vehicle not found"}


# ---------------------------------------------------------------------------
# Advisor
# ---------------------------------------------------------------------------


class TestAdvisorRoute:
    def test_empty_query(self, client):
        response = client.post("/api/advisor", json={"query": "  "})
        assert response.status_code == 400
        assert response.json() == {"message": "Please provide a query text."}

    def test_missing_query_treated_as_empty(self, client):
        assert client.post("/api/advisor", json={}).status_code == 400

    def test_null_query_treated_as_empty(self, client):
        response = client.post("/api/advisor", json={"query": None})
        assert response.status_code == 400
        assert response.json() == {"message": "Please provide a query text."}

    def test_match(self, client):
        response = client.post("/api/advisor", json={"query": "tata car"})
        assert response.status_code == 200
        body = response.json()
        assert body["confidence"] == 100
        assert body["totalResults"] == 2
        assert body["contextTags"] == ["type:car", "brand:tata"]
        assert body["appliedFilters"] == {"type": "car", "brand": {"pattern": "tata"}}
        assert "fallback" not in body

    def test_family_suv_filters(self, client):
        body = client.post("/api/advisor", json={"query": "family suv under 8 lakh"}).json()
        assert body["appliedFilters"]["bodyType"] == {"pattern": "suv|sedan"}
        assert body["appliedFilters"]["mileage"] == {"gte": 15}
        assert body["appliedFilters"]["price"] == {"lte": 800_000}
        assert [v["id"] for v in body["results"]] == ["v-punch"]

    def test_fallback_shape(self, client):
        response = client.post("/api/advisor", json={"query": "tata bike"})
        assert response.status_code == 200
        body = response.json()
        assert body["fallback"] is True
        assert body["confidence"] == 70
        assert len(body["results"]) <= 8
        assert all(v["id"] for v in body["results"])


class TestAIAdvisorRoute:
    def test_not_configured(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(OPENAI_API_KEY="")
        response = client.post("/api/advisor/ai", json={"query": "a car"})
        assert response.status_code == 503
        assert "OPENAI_API_KEY" in response.json()["message"]

    def test_configured(self, client):
        stub, _ = stub_client(json.dumps({"type": "bike", "maxPrice": 150000}))
        app.dependency_overrides[get_llm_advisor] = lambda: LLMAdvisor(stub)
        response = client.post("/api/advisor/ai", json={"query": "bike under 1.5 lakh"})
        assert response.status_code == 200
        body = response.json()
        assert [v["id"] for v in body["results"]] == ["v-iqube", "v-pulsar-ns200"]
        assert body["filters"]["type"] == "bike"


# ---------------------------------------------------------------------------
# Catalog reads
# ---------------------------------------------------------------------------


class TestVehicleRoutes:
    def test_list_all(self, client):
        assert len(client.get("/api/vehicles").json()) == 14

    def test_list_by_type(self, client):
        vehicles = client.get("/api/vehicles", params={"type": "Bike"}).json()
        assert len(vehicles) == 4
        assert {v["type"] for v in vehicles} == {"bike"}

    def test_list_by_brand_substring(self, client):
        vehicles = client.get("/api/vehicles", params={"brand": "tat"}).json()
        assert {v["id"] for v in vehicles} == {"v-nexon-ev", "v-punch"}

    def test_list_by_price(self, client):
        vehicles = client.get(
            "/api/vehicles", params={"minPrice": 1_000_000, "maxPrice": 1_500_000}
        ).json()
        assert all(1_000_000 <= v["price"] <= 1_500_000 for v in vehicles)
        assert len(vehicles) == 6

    def test_trending(self, client):
        vehicles = client.get("/api/vehicles/trending").json()
        assert len(vehicles) == 7
        assert all(v["isTrending"] for v in vehicles)

    def test_trending_limit(self, client):
        assert len(client.get("/api/vehicles/trending", params={"limit": 2}).json()) == 2
        assert client.get("/api/vehicles/trending", params={"limit": 0}).status_code == 422

    def test_get_vehicle(self, client):
        body = client.get("/api/vehicles/v-punch").json()
        assert body["name"] == "Punch"
        assert body["fuelType"] == "Petrol"

    def test_get_missing_vehicle(self, client):
        response = client.get("/api/vehicles/nope")
        assert response.status_code == 404
        assert response.json()["message"] == "Vehicle not found"

    def test_compare(self, client):
        response = client.post("/api/vehicles/compare", json={"ids": ["v-punch", "v-creta"]})
        assert response.status_code == 200
        assert response.json()["count"] == 2

    def test_compare_needs_two(self, client):
        response = client.post("/api/vehicles/compare", json={"ids": ["v-punch"]})
        assert response.status_code == 400
        assert response.json() == {"message": "Need at least 2 vehicle IDs."}
