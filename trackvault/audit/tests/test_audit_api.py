# trackvault/audit/tests/test_audit_api.py
from datetime import date
from decimal import Decimal

import pytest

from trackvault.audit.services import AuditService

pytestmark = pytest.mark.django_db


def test_audit_events_admin_only(api_client, manager_client):
    assert api_client.get("/api/v1/audit/events/").status_code == 200
    assert manager_client.get("/api/v1/audit/events/").status_code == 403


def test_audit_events_filters(api_client, user, supplier, product):
    AuditService.log(
        event_code="supplier.updated",
        entity_type="Supplier",
        entity_id=supplier.id,
        actor_user_id=user.id,
        metadata={"updated_fields": ["phone"]},
    )
    AuditService.log(
        event_code="product.updated",
        entity_type="Product",
        entity_id=product.id,
        actor_user_id=None,
    )

    res = api_client.get(f"/api/v1/audit/events/?entity_type=Supplier&entity_id={supplier.id}")
    assert res.status_code == 200
    rows = res.json()["results"]
    assert len(rows) == 1
    assert rows[0]["event_code"] == "supplier.updated"
    assert rows[0]["actor_user_id"] == user.id
    assert rows[0]["metadata"] == {"updated_fields": ["phone"]}

    res = api_client.get("/api/v1/audit/events/?event_code=product.updated")
    assert [r["entity_id"] for r in res.json()["results"]] == [str(product.id)]


def test_audit_events_bad_entity_id(api_client):
    res = api_client.get("/api/v1/audit/events/?entity_id=nope")
    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"entity_id": ["Invalid UUID"]}


def test_audit_events_are_append_only(supplier):
    event = AuditService.log(
        event_code="supplier.created",
        entity_type="Supplier",
        entity_id=supplier.id,
        actor_user_id=None,
    )
    event.event_code = "supplier.deleted"
    with pytest.raises(ValueError):
        event.save()


def test_audit_metadata_is_stored_json_safe(supplier):
    event = AuditService.log(
        event_code="payment.created",
        entity_type="Payment",
        entity_id=supplier.id,
        actor_user_id=None,
        metadata={"amount": Decimal("12.5000"), "payment_date": date(2024, 3, 15), "supplier_id": supplier.id},
    )
    event.refresh_from_db()
    assert event.metadata == {
        "amount": "12.5000",
        "payment_date": "2024-03-15",
        "supplier_id": str(supplier.id),
    }


def test_audit_event_code_family_filter(api_client, supplier, product):
    for code in ("product_rate.created", "product_rate.closed", "product.updated"):
        AuditService.log(event_code=code, entity_type="X", entity_id=product.id, actor_user_id=None)

    res = api_client.get("/api/v1/audit/events/?event_code=product_rate.")
    codes = sorted(r["event_code"] for r in res.json()["results"])
    assert codes == ["product_rate.closed", "product_rate.created"]
