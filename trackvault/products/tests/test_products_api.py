# trackvault/products/tests/test_products_api.py
from datetime import date

import pytest

from trackvault.audit.models import AuditEvent
from trackvault.audit.services import AuditService
from trackvault.collections.services import CollectionService
from trackvault.products.models import Product, ProductRate
from trackvault.products.services import ProductRateService

pytestmark = pytest.mark.django_db


def _rates_url(product):
    return f"/api/v1/products/{product.id}/rates/"


def test_create_product_and_reject_duplicate_code(api_client):
    payload = {"name": "Cinnamon", "code": "CIN-01", "base_unit": "kg", "allowed_units": ["g", "kg"]}

    res = api_client.post("/api/v1/products/", payload, format="json")
    assert res.status_code == 201, res.data
    body = res.json()
    assert body["units"] == ["kg", "g"]
    assert body["version"] == 1

    res = api_client.post("/api/v1/products/", payload, format="json")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_update_product_bumps_version(api_client, product):
    res = api_client.patch(f"/api/v1/products/{product.id}/", {"name": "Black Tea"}, format="json")
    assert res.status_code == 200
    assert res.json()["name"] == "Black Tea"
    assert res.json()["version"] == 2


def test_list_products_search(api_client, product):
    Product.objects.create(name="Rubber", code="RUB-01", base_unit="kg")

    res = api_client.get("/api/v1/products/?q=tea")
    assert res.status_code == 200
    assert [p["code"] for p in res.json()["results"]] == ["TEA-01"]


def test_unknown_product_returns_not_found_envelope(api_client):
    res = api_client.get("/api/v1/products/00000000-0000-0000-0000-000000000000/")
    assert res.status_code == 404
    err = res.json()["error"]
    assert err["code"] == "not_found"
    assert err["request_id"]


def test_add_rate_and_resolve_current_rate(api_client, product):
    res = api_client.post(
        _rates_url(product),
        {"rate": "10.00", "unit": "kg", "effective_from": "2024-01-01", "effective_to": "2024-06-30"},
        format="json",
    )
    assert res.status_code == 201, res.data
    rate_id = res.json()["id"]

    res = api_client.get(f"/api/v1/products/{product.id}/current-rate/?unit=kg&date=2024-03-15")
    assert res.status_code == 200
    assert res.json()["id"] == rate_id
    assert res.json()["rate"] == "10.0000"

    res = api_client.get(f"/api/v1/products/{product.id}/current-rate/?unit=kg&date=2024-07-01")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "not_found"

    assert AuditEvent.objects.filter(event_code="product_rate.created", entity_id=rate_id).exists()


def test_add_rate_rejects_unit_not_allowed_for_product(api_client, product):
    res = api_client.post(
        _rates_url(product),
        {"rate": "10.00", "unit": "l", "effective_from": "2024-01-01"},
        format="json",
    )
    assert res.status_code == 400
    assert "unit" in res.json()["error"]["details"]


def test_add_rate_rejects_inverted_interval(api_client, product):
    res = api_client.post(
        _rates_url(product),
        {"rate": "10.00", "unit": "kg", "effective_from": "2024-06-30", "effective_to": "2024-01-01"},
        format="json",
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_overlapping_rate_returns_conflict_envelope(api_client, product, product_rate):
    res = api_client.post(
        _rates_url(product),
        {"rate": "11.00", "unit": "kg", "effective_from": "2024-03-01"},
        format="json",
    )
    assert res.status_code == 409
    err = res.json()["error"]
    assert err["code"] == "conflict"
    assert err["details"]["conflicting_rate_ids"] == [str(product_rate.id)]
    assert ProductRate.objects.filter(product=product).count() == 1


def test_list_rates_active_only(api_client, product, product_rate):
    ProductRate.objects.create(
        product=product,
        rate="9.0000",
        unit="kg",
        effective_from=date(2023, 1, 1),
        effective_to=date(2023, 12, 31),
        is_active=False,
    )

    res = api_client.get(_rates_url(product))
    assert res.status_code == 200
    assert len(res.json()) == 2

    res = api_client.get(_rates_url(product) + "?active_only=1")
    assert [r["id"] for r in res.json()] == [str(product_rate.id)]


def test_supersede_endpoint(api_client, product):
    api_client.post(_rates_url(product), {"rate": "10.00", "unit": "kg", "effective_from": "2024-01-01"}, format="json")

    res = api_client.post(
        _rates_url(product) + "supersede/",
        {"rate": "12.00", "unit": "kg", "effective_from": "2024-09-01"},
        format="json",
    )
    assert res.status_code == 201, res.data
    body = res.json()
    assert body["closed"][0]["effective_to"] == "2024-08-31"
    assert body["rate"]["effective_to"] is None
    assert AuditEvent.objects.filter(event_code="product_rate.closed").count() == 1


def test_deactivate_and_activate_rate(api_client, product, product_rate):
    res = api_client.post(f"/api/v1/product-rates/{product_rate.id}/deactivate/")
    assert res.status_code == 200
    assert res.json()["is_active"] is False
    assert res.json()["version"] == 2

    res = api_client.get(f"/api/v1/products/{product.id}/current-rate/?unit=kg&date=2024-03-15")
    assert res.status_code == 404

    res = api_client.post(f"/api/v1/product-rates/{product_rate.id}/activate/")
    assert res.status_code == 200
    assert res.json()["is_active"] is True
    assert res.json()["version"] == 3


def test_rate_state_change_unknown_id(api_client):
    res = api_client.post("/api/v1/product-rates/00000000-0000-0000-0000-000000000000/deactivate/")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "not_found"


def test_rate_writes_need_manager(viewer_client, manager_client, product):
    payload = {"rate": "10.00", "unit": "kg", "effective_from": "2024-01-01"}

    res = viewer_client.post(_rates_url(product), payload, format="json")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"

    # readers can still list rates
    assert viewer_client.get(_rates_url(product)).status_code == 200

    assert manager_client.post(_rates_url(product), payload, format="json").status_code == 201


def test_delete_product_with_collections_conflicts(api_client, user, product, product_rate, supplier):
    CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity="5",
        unit="kg",
        collection_date=date(2024, 3, 15),
    )

    res = api_client.delete(f"/api/v1/products/{product.id}/")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"


def test_delete_product_without_collections(api_client, product, product_rate):
    res = api_client.delete(f"/api/v1/products/{product.id}/")
    assert res.status_code == 204
    assert not Product.objects.filter(id=product.id).exists()
    assert not ProductRate.objects.filter(id=product_rate.id).exists()


def test_rate_is_rolled_back_when_audit_write_fails(user, product, monkeypatch):
    def failing_log(**kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(AuditService, "log", failing_log)

    with pytest.raises(RuntimeError):
        ProductRateService().add_rate(
            actor_user_id=user.id,
            product_id=product.id,
            rate="10.00",
            unit="kg",
            effective_from=date(2024, 1, 1),
        )

    assert not ProductRate.objects.filter(product=product).exists()


def test_repeated_state_change_is_audited_once(api_client, product_rate):
    url = f"/api/v1/product-rates/{product_rate.id}/deactivate/"
    assert api_client.post(url).json()["version"] == 2
    assert api_client.post(url).json()["version"] == 2

    events = AuditEvent.objects.filter(entity_id=product_rate.id, event_code="product_rate.deactivated")
    assert events.count() == 1

    api_client.post(f"/api/v1/product-rates/{product_rate.id}/activate/")
    api_client.post(f"/api/v1/product-rates/{product_rate.id}/activate/")
    assert AuditEvent.objects.filter(entity_id=product_rate.id, event_code="product_rate.activated").count() == 1


def test_update_product_with_stale_version_conflicts(api_client, product):
    res = api_client.patch(f"/api/v1/products/{product.id}/", {"name": "Green Tea", "version": 1}, format="json")
    assert res.status_code == 200
    assert res.json()["version"] == 2

    res = api_client.patch(f"/api/v1/products/{product.id}/", {"name": "White Tea", "version": 1}, format="json")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"

    product.refresh_from_db()
    assert product.name == "Green Tea"
    assert product.version == 2


def test_version_alone_is_not_an_update(api_client, product):
    res = api_client.patch(f"/api/v1/products/{product.id}/", {"version": 1}, format="json")
    assert res.status_code == 400
