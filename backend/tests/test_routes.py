"""API route tests with FastAPI TestClient and dependency overrides."""

import inspect

import pytest
from conftest import FakeCatalog
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from sisustus.api import deps
from sisustus.api.deps import close_catalog, get_assist, get_catalog
from sisustus.api.main import app
from sisustus.config import COMMERCE_CONFIG
from sisustus.services.llm import NullAssist


class ExplodingCatalog(FakeCatalog):
    def fetch_all_categories(self, max_pages: int = 25):
        raise RuntimeError("category tree unavailable")

    def get_product(self, handle_or_id: str):
        raise ValueError(f"bad product reference {handle_or_id}")


@pytest.fixture
def client(bedroom_catalog, cabinet_categories):
    app.dependency_overrides[get_catalog] = lambda: FakeCatalog(bedroom_catalog, cabinet_categories)
    app.dependency_overrides[get_assist] = lambda: NullAssist()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client(bedroom_catalog):
    app.dependency_overrides[get_catalog] = lambda: ExplodingCatalog(bedroom_catalog)
    app.dependency_overrides[get_assist] = lambda: NullAssist()
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


BUNDLE_BODY = {
    "room": "Magamistuba",
    "anchor_product": "Voodi",
    "budget_range": "2000-4000",
    "style": "Modern",
    "selected_elements": ["Voodi", "Öökapp", "Kummut"],
}


class TestHealth:
    def test_root_and_health(self, client):
        assert client.get("/").json()["status"] == "running"
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/api/chat/health").json() == {"ok": True}


class TestChatRoute:
    def test_empty_message_rejected(self, client):
        response = client.post("/api/chat", json={"message": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Sõnum on kohustuslik"

    def test_greeting(self, client):
        response = client.post("/api/chat", json={"message": "Tere!", "cart_id": "abc"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"].startswith("Tere!")
        assert body["cart_id"] == "abc"

    def test_product_cards_hide_description(self, client):
        body = client.post("/api/chat", json={"message": "öökapp"}).json()
        assert body["cards"]
        assert all("description" not in card for card in body["cards"])

    def test_failure_returns_apology(self, broken_client):
        response = broken_client.post("/api/chat", json={"message": "soovin kappi"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"].startswith("Vabandust")
        assert body["suggestions"] == ["Tarne info", "Tagastamine", "Kontakt"]


class TestBundleRoutes:
    def test_missing_answers_rejected(self, client):
        response = client.post("/api/bundle", json={"room": "Magamistuba", "budget_range": "2000-4000"})
        assert response.status_code == 400

    @pytest.mark.parametrize("custom", [None, 0, -100])
    def test_custom_budget_must_be_positive(self, client, custom):
        body = {**BUNDLE_BODY, "budget_range": "custom", "budget_custom": custom}
        assert client.post("/api/bundle", json=body).status_code == 400

    def test_build_bundles(self, client):
        response = client.post("/api/bundle", json=BUNDLE_BODY)
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Siin on sinu personaalsed komplektid:"
        assert 1 <= len(body["bundles"]) <= 3
        assert body["bundles"][0]["items"][0]["role_in_bundle"] == "ankur"

    def test_alternatives(self, client):
        bundle = client.post("/api/bundle", json=BUNDLE_BODY).json()["bundles"][0]
        item_id = bundle["items"][0]["id"]
        response = client.post(
            "/api/bundle/alternatives",
            json={"answers": BUNDLE_BODY, "bundle": bundle, "item_id": item_id},
        )
        assert response.status_code == 200
        alternatives = response.json()["alternatives"]
        in_bundle = {item["id"] for item in bundle["items"]}
        assert alternatives
        assert not in_bundle.intersection(alt["id"] for alt in alternatives)

    def test_alternatives_unknown_item(self, client):
        bundle = client.post("/api/bundle", json=BUNDLE_BODY).json()["bundles"][0]
        response = client.post(
            "/api/bundle/alternatives",
            json={"answers": BUNDLE_BODY, "bundle": bundle, "item_id": "nope"},
        )
        assert response.status_code == 404


class TestStorefrontRoutes:
    def test_search(self, client):
        body = client.get("/api/storefront/search", params={"q": "kummut"}).json()
        assert [product["id"] for product in body["products"]] == ["5"]

    def test_search_requires_query(self, client):
        assert client.get("/api/storefront/search").status_code == 400

    def test_recommend(self, client):
        response = client.post("/api/storefront/recommend", json={"query": "öökapp alla 50cm"})
        assert response.status_code == 200
        assert [product["id"] for product in response.json()["products"]] == ["3"]

    def test_product_lookup(self, client):
        assert client.get("/api/storefront/product/5").json()["title"] == "Kummut Mira"
        assert client.get("/api/storefront/product/missing").status_code == 404
        assert client.get("/api/storefront/product/0").status_code == 400

    def test_global_handler_maps_value_error(self, broken_client):
        response = broken_client.get("/api/storefront/product/abc")
        assert response.status_code == 400
        body = response.json()
        assert body["message"].startswith("Vabandust")
        assert COMMERCE_CONFIG["support_email"] in body["message"]
        assert "error" not in body
        assert "bad product reference" not in str(body)


class TestApp:
    @pytest.mark.parametrize(
        "path",
        [
            "/api/chat",
            "/api/bundle",
            "/api/bundle/alternatives",
            "/api/storefront/search",
            "/api/storefront/recommend",
            "/api/storefront/product/{handle_or_id}",
        ],
    )
    def test_store_bound_routes_run_in_threadpool(self, path):
        route = next(route for route in app.routes if isinstance(route, APIRoute) and route.path == path)
        assert not inspect.iscoroutinefunction(route.endpoint)

    def test_close_catalog_on_shutdown(self, monkeypatch):
        class ClosableCatalog:
            closed = False

            def close(self):
                self.closed = True

        catalog = ClosableCatalog()
        monkeypatch.setattr(deps, "_catalog", catalog)
        with TestClient(app):
            pass
        assert catalog.closed
        assert deps._catalog is None

    def test_close_catalog_without_client(self, monkeypatch):
        monkeypatch.setattr(deps, "_catalog", None)
        close_catalog()
        assert deps._catalog is None
