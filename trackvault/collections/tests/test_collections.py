# trackvault/collections/tests/test_collections.py
import uuid
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from trackvault.audit.models import AuditEvent
from trackvault.collections.models import Collection
from trackvault.collections.services import CollectionService
from trackvault.common.api.exceptions import NotFoundError
from trackvault.products.models import ProductRate

pytestmark = pytest.mark.django_db


def _payload(supplier, product, **overrides):
    data = {
        "supplier_id": str(supplier.id),
        "product_id": str(product.id),
        "quantity": "12.5",
        "unit": "kg",
        "collection_date": "2024-03-15",
    }
    data.update(overrides)
    return data


def test_collection_uses_rate_in_effect_on_collection_date(user, supplier, product, product_rate):
    ProductRate.objects.create(product=product, rate=Decimal("14.0000"), unit="kg", effective_from=date(2024, 7, 1))

    c1 = CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity=Decimal("12.5"),
        unit="kg",
        collection_date=date(2024, 3, 15),
    )
    assert c1.rate == Decimal("10.0000")
    assert c1.product_rate_id == product_rate.id
    assert c1.total_amount == Decimal("125.0000")

    c2 = CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity=Decimal("2"),
        unit="kg",
        collection_date=date(2024, 8, 1),
    )
    assert c2.rate == Decimal("14.0000")
    assert c2.total_amount == Decimal("28.0000")


def test_explicit_rate_wins_and_is_not_linked(user, supplier, product, product_rate):
    c = CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity=Decimal("3"),
        unit="kg",
        collection_date=date(2024, 3, 15),
        rate=Decimal("11.3333"),
    )
    assert c.product_rate_id is None
    assert c.total_amount == Decimal("33.9999")


def test_missing_rate_is_validation_error(user, supplier, product, product_rate):
    with pytest.raises(ValidationError) as exc:
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=Decimal("1"),
            unit="kg",
            collection_date=date(2024, 7, 1),
        )
    assert "rate" in exc.value.detail
    assert Collection.objects.count() == 0


@pytest.mark.parametrize("quantity", [Decimal("0"), Decimal("-1")])
def test_non_positive_quantity_rejected(user, supplier, product, product_rate, quantity):
    with pytest.raises(ValidationError):
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=quantity,
            unit="kg",
            collection_date=date(2024, 3, 15),
        )


def test_unit_must_be_allowed_for_product(user, supplier, product, product_rate):
    with pytest.raises(ValidationError) as exc:
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=Decimal("1"),
            unit="l",
            collection_date=date(2024, 3, 15),
            rate=Decimal("1"),
        )
    assert "unit" in exc.value.detail


def test_unknown_supplier_is_not_found(user, product, product_rate):
    with pytest.raises(NotFoundError):
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=uuid.uuid4(),
            product_id=product.id,
            quantity=Decimal("1"),
            unit="kg",
            collection_date=date(2024, 3, 15),
        )


def test_create_collection_api(collector_client, supplier, product, product_rate):
    res = collector_client.post("/api/v1/collections/", _payload(supplier, product), format="json")
    assert res.status_code == 201, res.data

    body = res.json()
    assert body["rate"] == "10.0000"
    assert body["total_amount"] == "125.0000"
    assert body["product_rate"] == str(product_rate.id)
    assert body["supplier_name"] == supplier.name


def test_create_collection_api_without_rate_returns_400(api_client, supplier, product, product_rate):
    res = api_client.post(
        "/api/v1/collections/",
        _payload(supplier, product, collection_date="2025-01-01"),
        format="json",
    )
    assert res.status_code == 400
    err = res.json()["error"]
    assert err["code"] == "validation_error"
    assert "rate" in err["details"]


def test_list_collections_filters(api_client, user, supplier, product, product_rate):
    for d in (date(2024, 2, 1), date(2024, 3, 1), date(2024, 4, 1)):
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=Decimal("1"),
            unit="kg",
            collection_date=d,
        )

    res = api_client.get(f"/api/v1/collections/?supplier={supplier.id}&from_date=2024-02-15&to_date=2024-04-01")
    assert res.status_code == 200
    dates = [c["collection_date"] for c in res.json()["results"]]
    assert dates == ["2024-04-01", "2024-03-01"]

    res = api_client.get("/api/v1/collections/?from_date=not-a-date")
    assert res.status_code == 400


def test_viewer_cannot_create_or_delete(viewer_client, user, supplier, product, product_rate):
    res = viewer_client.post("/api/v1/collections/", _payload(supplier, product), format="json")
    assert res.status_code == 403

    c = CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity=Decimal("1"),
        unit="kg",
        collection_date=date(2024, 3, 15),
    )
    assert viewer_client.get(f"/api/v1/collections/{c.id}/").status_code == 200
    assert viewer_client.delete(f"/api/v1/collections/{c.id}/").status_code == 403


def test_delete_collection(manager_client, user, supplier, product, product_rate):
    c = CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity=Decimal("1"),
        unit="kg",
        collection_date=date(2024, 3, 15),
    )
    res = manager_client.delete(f"/api/v1/collections/{c.id}/")
    assert res.status_code == 204
    assert not Collection.objects.filter(id=c.id).exists()


@pytest.fixture
def collection(user, supplier, product, product_rate):
    return CollectionService.create_collection(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        product_id=product.id,
        quantity=Decimal("10"),
        unit="kg",
        collection_date=date(2024, 3, 15),
    )


def test_update_quantity_keeps_rate_and_recomputes_total(manager_client, collection, product_rate):
    res = manager_client.patch(
        f"/api/v1/collections/{collection.id}/",
        {"quantity": "4", "version": 1},
        format="json",
    )
    assert res.status_code == 200, res.data
    body = res.json()
    assert body["rate"] == "10.0000"
    assert body["total_amount"] == "40.0000"
    assert body["product_rate"] == str(product_rate.id)
    assert body["version"] == 2


def test_update_date_reprices_from_rate_in_effect(user, product, collection):
    later = ProductRate.objects.create(product=product, rate=Decimal("14.0000"), unit="kg", effective_from=date(2024, 7, 1))

    updated = CollectionService.update_collection(
        actor_user_id=user.id,
        collection_id=collection.id,
        version=1,
        data={"collection_date": date(2024, 8, 1)},
    )
    assert updated.rate == Decimal("14.0000")
    assert updated.product_rate_id == later.id
    assert updated.total_amount == Decimal("140.0000")
    assert AuditEvent.objects.filter(event_code="collection.updated", entity_id=collection.id).count() == 1


def test_update_with_explicit_rate_unlinks_product_rate(user, collection):
    updated = CollectionService.update_collection(
        actor_user_id=user.id,
        collection_id=collection.id,
        version=1,
        data={"rate": Decimal("12.5")},
    )
    assert updated.product_rate_id is None
    assert updated.total_amount == Decimal("125.0000")


def test_update_to_date_without_rate_is_rejected(user, collection):
    with pytest.raises(ValidationError) as exc:
        CollectionService.update_collection(
            actor_user_id=user.id,
            collection_id=collection.id,
            version=1,
            data={"collection_date": date(2025, 1, 1)},
        )
    assert "rate" in exc.value.detail

    collection.refresh_from_db()
    assert collection.collection_date == date(2024, 3, 15)
    assert collection.version == 1


def test_update_collection_with_stale_version_conflicts(manager_client, collection):
    url = f"/api/v1/collections/{collection.id}/"
    assert manager_client.patch(url, {"notes": "wet leaves", "version": 1}, format="json").status_code == 200

    res = manager_client.patch(url, {"notes": "dry leaves", "version": 1}, format="json")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"

    collection.refresh_from_db()
    assert collection.notes == "wet leaves"


def test_update_collection_requires_version(manager_client, collection):
    res = manager_client.patch(f"/api/v1/collections/{collection.id}/", {"notes": "x"}, format="json")
    assert res.status_code == 400
    assert "version" in res.json()["error"]["details"]


def test_collector_cannot_update(collector_client, collection):
    res = collector_client.patch(f"/api/v1/collections/{collection.id}/", {"notes": "x", "version": 1}, format="json")
    assert res.status_code == 403


def test_total_beyond_column_precision_is_rejected(user, supplier, product):
    with pytest.raises(ValidationError) as exc:
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=Decimal("99999999999"),
            unit="kg",
            collection_date=date(2024, 3, 15),
            rate=Decimal("99999999999"),
        )
    assert "quantity" in exc.value.detail
    assert Collection.objects.count() == 0
