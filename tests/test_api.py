"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from pricelist_resolver.api.main import create_app
from pricelist_resolver.api.products_api import get_resolver
from pricelist_resolver.backend.snapshot import SnapshotBackend
from pricelist_resolver.engine import ProductResolver


@pytest.fixture
def client(sample_snapshot_path):
    app = create_app(backend=SnapshotBackend.from_file(sample_snapshot_path))
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "online"


def test_lookup_by_path(client):
    resp = client.get("/product-by-barcode/7501000000010")
    assert resp.status_code == 200

    body = resp.json()
    assert body["success"] is True
    assert body["barcode"] == "7501000000010"
    assert body["product_name"] == "Classic Tee Red XL"
    assert body["lst_price"] == 19.9
    assert body["candidate_rule_count"] == 4
    assert set(body["rules_by_application"]) == {"global", "category", "product_template", "product_variant"}
    assert body["rules_by_application"]["product_variant"][0]["fixed_price"] == 17.5
    assert body["rules_by_application"]["global"][0]["product_name"] == "Classic Tee Red XL"
    assert "trace" not in body


def test_lookup_by_body(client):
    resp = client.post("/product-by-barcode", json={"barcode": "7501000000027"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["product_name"] == "Gift Card"
    assert body["rules_by_application"]["category"] == []


def test_lookup_with_trace(client):
    resp = client.get("/product-by-barcode/7501000000010", params={"trace": "true"})
    steps = [t["step"] for t in resp.json()["trace"]]
    assert "Product Lookup" in steps
    assert "Candidates" in steps


def test_not_found(client):
    resp = client.get("/product-by-barcode/0000")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Product not found"}


def test_missing_barcode_is_validation_error(client):
    resp = client.post("/product-by-barcode", json={})
    assert resp.status_code == 422


def test_backend_error_is_generic(make_backend, make_product):
    """A failing backend gives a 500 without leaking backend details."""
    backend = make_backend(products=[make_product()], fail_on="search_rules")
    app = create_app(backend=backend)

    with TestClient(app) as test_client:
        resp = test_client.get("/product-by-barcode/123")

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "10.0.0.5" not in resp.text
    assert "search_rules" not in resp.text


def test_malformed_rule_gives_json_error(make_backend, make_product, make_rule):
    backend = make_backend(
        products=[make_product()],
        rules=[make_rule(1, '3_global', min_quantity='n/a')],
    )
    app = create_app(backend=backend)

    with TestClient(app) as test_client:
        resp = test_client.get("/product-by-barcode/123")

    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"success": False, "error": "Error looking up product and rules"}


def test_resolver_dependency_override(sample_snapshot_path, make_backend):
    app = create_app(backend=SnapshotBackend.from_file(sample_snapshot_path))
    stub = make_backend(products=[])
    app.dependency_overrides[get_resolver] = lambda: ProductResolver(stub)

    with TestClient(app) as test_client:
        resp = test_client.get("/product-by-barcode/7501000000010")

    assert resp.status_code == 404
    assert stub.calls == ["find_products_by_code"]
    app.dependency_overrides.clear()


def test_system_status(client):
    body = client.get("/system/status").json()
    assert body["engine_active"] is True
    assert body["backend"] == "snapshot"
    assert body["products"] == 4
