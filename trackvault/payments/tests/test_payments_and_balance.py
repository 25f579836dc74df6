# trackvault/payments/tests/test_payments_and_balance.py
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from trackvault.collections.services import CollectionService
from trackvault.common.api.exceptions import ConflictError
from trackvault.payments.models import Payment, PaymentType
from trackvault.payments.services import BalanceService, PaymentService

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger(user, supplier, product, product_rate):
    """
    Feb: 10kg (100.00), Mar: 5kg (50.00); advance 30.00 in Feb, partial 45.50 in Apr.
    """
    for d, qty in ((date(2024, 2, 10), "10"), (date(2024, 3, 10), "5")):
        CollectionService.create_collection(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=Decimal(qty),
            unit="kg",
            collection_date=d,
        )
    PaymentService.record_payment(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        amount=Decimal("30.00"),
        payment_type=PaymentType.ADVANCE,
        payment_date=date(2024, 2, 1),
    )
    PaymentService.record_payment(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        amount=Decimal("45.50"),
        payment_type=PaymentType.PARTIAL,
        payment_date=date(2024, 4, 1),
    )
    return supplier


def test_balance_over_all_time(ledger):
    balance = BalanceService.calculate_balance(supplier_id=ledger.id)
    assert balance["total_collections"] == Decimal("150.0000")
    assert balance["total_payments"] == Decimal("75.5000")
    assert balance["outstanding_balance"] == Decimal("74.5000")


def test_balance_window_is_inclusive(ledger):
    balance = BalanceService.calculate_balance(
        supplier_id=ledger.id,
        from_date=date(2024, 2, 1),
        to_date=date(2024, 2, 29),
    )
    assert balance["total_collections"] == Decimal("100.0000")
    assert balance["total_payments"] == Decimal("30.0000")
    assert balance["outstanding_balance"] == Decimal("70.0000")


def test_balance_without_activity_is_zero(supplier):
    balance = BalanceService.calculate_balance(supplier_id=supplier.id)
    assert balance["outstanding_balance"] == Decimal("0.0000")


def test_balance_rejects_inverted_window(supplier):
    with pytest.raises(ValidationError):
        BalanceService.calculate_balance(
            supplier_id=supplier.id,
            from_date=date(2024, 3, 1),
            to_date=date(2024, 2, 1),
        )


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
def test_non_positive_payment_rejected(user, supplier, amount):
    with pytest.raises(ValidationError):
        PaymentService.record_payment(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            amount=amount,
            payment_date=date(2024, 1, 1),
        )


def test_unknown_payment_type_rejected(user, supplier):
    with pytest.raises(ValidationError):
        PaymentService.record_payment(
            actor_user_id=user.id,
            supplier_id=supplier.id,
            amount=Decimal("1"),
            payment_type="bonus",
            payment_date=date(2024, 1, 1),
        )


def test_supplier_balance_endpoint(api_client, ledger):
    res = api_client.get(f"/api/v1/suppliers/{ledger.id}/balance/?to_date=2024-03-31")
    assert res.status_code == 200
    body = res.json()
    assert body["total_collections"] == "150.0000"
    assert body["total_payments"] == "30.0000"
    assert body["outstanding_balance"] == "120.0000"
    assert body["to_date"] == "2024-03-31"


def test_calculate_endpoint(manager_client, ledger):
    res = manager_client.post(
        "/api/v1/payments/calculate/",
        {"supplier_id": str(ledger.id), "from_date": "2024-03-01"},
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["outstanding_balance"] == "4.5000"


def test_create_list_and_delete_payment_api(api_client, supplier):
    res = api_client.post(
        "/api/v1/payments/",
        {
            "supplier_id": str(supplier.id),
            "amount": "250.00",
            "payment_type": "final",
            "payment_date": "2024-05-01",
            "payment_method": "bank",
            "reference_number": "TRX-778",
        },
        format="json",
    )
    assert res.status_code == 201, res.data
    pay_id = res.json()["id"]
    assert res.json()["amount"] == "250.0000"

    res = api_client.get(f"/api/v1/payments/?supplier={supplier.id}&payment_type=final")
    assert [p["id"] for p in res.json()["results"]] == [pay_id]

    res = api_client.delete(f"/api/v1/payments/{pay_id}/")
    assert res.status_code == 204
    assert not Payment.objects.filter(id=pay_id).exists()


def test_payment_for_unknown_supplier_is_not_found(api_client):
    res = api_client.post(
        "/api/v1/payments/",
        {
            "supplier_id": "00000000-0000-0000-0000-000000000000",
            "amount": "1.00",
            "payment_date": "2024-05-01",
        },
        format="json",
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "not_found"


def test_collector_cannot_see_payments(collector_client):
    res = collector_client.get("/api/v1/payments/")
    assert res.status_code == 403


@pytest.fixture
def payment(user, supplier):
    return PaymentService.record_payment(
        actor_user_id=user.id,
        supplier_id=supplier.id,
        amount=Decimal("100.00"),
        payment_date=date(2024, 3, 1),
    )


def test_update_payment_bumps_version(manager_client, payment):
    res = manager_client.patch(
        f"/api/v1/payments/{payment.id}/",
        {"amount": "120.00", "payment_type": "final", "version": 1},
        format="json",
    )
    assert res.status_code == 200, res.data
    body = res.json()
    assert body["amount"] == "120.0000"
    assert body["payment_type"] == "final"
    assert body["version"] == 2


def test_update_payment_with_stale_version_conflicts(user, payment):
    PaymentService.update_payment(actor_user_id=user.id, payment_id=payment.id, version=1, data={"notes": "cash"})

    with pytest.raises(ConflictError):
        PaymentService.update_payment(
            actor_user_id=user.id,
            payment_id=payment.id,
            version=1,
            data={"amount": Decimal("1")},
        )

    payment.refresh_from_db()
    assert payment.amount == Decimal("100.0000")
    assert payment.notes == "cash"
    assert payment.version == 2


def test_update_payment_rejects_non_positive_amount(user, payment):
    with pytest.raises(ValidationError):
        PaymentService.update_payment(actor_user_id=user.id, payment_id=payment.id, version=1, data={"amount": 0})


def test_update_payment_stale_version_over_api(api_client, payment):
    res = api_client.patch(f"/api/v1/payments/{payment.id}/", {"notes": "late", "version": 7}, format="json")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"
