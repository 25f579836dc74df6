# trackvault/payments/services.py
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import ValidationError

from trackvault.audit.services import AuditService
from trackvault.collections.models import Collection
from trackvault.payments.models import Payment, PaymentType
from trackvault.payments.selectors import get_payment
from trackvault.suppliers.selectors import get_supplier

logger = logging.getLogger(__name__)

AMOUNT_QUANT = Decimal("0.0001")
# numeric(18, 4) amount column
AMOUNT_MAX = Decimal(10) ** 14

UPDATABLE_FIELDS = {
    "supplier_id",
    "amount",
    "payment_type",
    "payment_date",
    "payment_method",
    "reference_number",
    "notes",
    "metadata",
}


def _clean_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({"amount": "Must be a number."})
    if not amount.is_finite() or amount <= 0:
        raise ValidationError({"amount": "Payment amount must be > 0."})
    if amount >= AMOUNT_MAX:
        raise ValidationError({"amount": "Payment amount is too large."})
    return amount.quantize(AMOUNT_QUANT)


def _clean_payment_type(value: str) -> str:
    if value not in PaymentType.values:
        raise ValidationError({"payment_type": f"Unknown payment type '{value}'."})
    return value


class PaymentService:
    @staticmethod
    @transaction.atomic
    def record_payment(
        *,
        actor_user_id: int | None,
        supplier_id: UUID,
        amount: Decimal,
        payment_date: date,
        payment_type: str = PaymentType.PARTIAL,
        payment_method: str = "",
        reference_number: str = "",
        notes: str = "",
        metadata: dict | None = None,
    ) -> Payment:
        supplier = get_supplier(supplier_id=supplier_id)

        amount = _clean_amount(amount)
        payment_type = _clean_payment_type(payment_type)

        pay = Payment.objects.create(
            supplier=supplier,
            amount=amount,
            payment_type=payment_type,
            payment_date=payment_date,
            payment_method=payment_method or "",
            reference_number=reference_number or "",
            notes=notes or "",
            recorded_by_id=actor_user_id,
            metadata=metadata or {},
        )

        AuditService.log(
            event_code="payment.created",
            entity_type="Payment",
            entity_id=pay.id,
            actor_user_id=actor_user_id,
            metadata={
                "supplier_id": str(supplier.id),
                "amount": str(pay.amount),
                "payment_type": payment_type,
                "reference_number": pay.reference_number,
            },
        )
        logger.info("Payment %s: supplier=%s %s (%s)", pay.id, supplier.code, pay.amount, payment_type)
        return pay

    @staticmethod
    @transaction.atomic
    def update_payment(*, actor_user_id: int | None, payment_id: UUID, version: int, data: dict) -> Payment:
        pay = get_payment(payment_id=payment_id, for_update=True)
        pay.check_version(version)

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}

        if "supplier_id" in updates:
            pay.supplier = get_supplier(supplier_id=updates["supplier_id"])
        if "amount" in updates:
            pay.amount = _clean_amount(updates["amount"])
        if "payment_type" in updates:
            pay.payment_type = _clean_payment_type(updates["payment_type"])
        if "payment_date" in updates:
            pay.payment_date = updates["payment_date"]
        for field in ("payment_method", "reference_number", "notes"):
            if field in updates:
                setattr(pay, field, updates[field] or "")
        if "metadata" in updates:
            pay.metadata = updates["metadata"] or {}

        pay.bump_version()
        pay.save()

        AuditService.log(
            event_code="payment.updated",
            entity_type="Payment",
            entity_id=pay.id,
            actor_user_id=actor_user_id,
            metadata={
                "supplier_id": pay.supplier_id,
                "amount": pay.amount,
                "payment_type": pay.payment_type,
                "updated_fields": sorted(updates),
                "version": pay.version,
            },
        )
        logger.info("Payment %s updated to version %s", pay.id, pay.version)
        return pay

    @staticmethod
    @transaction.atomic
    def delete_payment(*, actor_user_id: int | None, payment_id: UUID) -> None:
        pay = get_payment(payment_id=payment_id)
        metadata = {"supplier_id": str(pay.supplier_id), "amount": str(pay.amount)}
        pay.delete()

        AuditService.log(
            event_code="payment.deleted",
            entity_type="Payment",
            entity_id=payment_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )


class BalanceService:
    @staticmethod
    def calculate_balance(
        *,
        supplier_id: UUID,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> dict[str, Any]:
        """
        Outstanding balance = collections total - payments total, both over
        the optional inclusive [from_date, to_date] window.
        """
        get_supplier(supplier_id=supplier_id)

        if from_date and to_date and to_date < from_date:
            raise ValidationError({"to_date": "Must not be before from_date."})

        collections = Collection.objects.filter(supplier_id=supplier_id)
        payments = Payment.objects.filter(supplier_id=supplier_id)
        if from_date:
            collections = collections.filter(collection_date__gte=from_date)
            payments = payments.filter(payment_date__gte=from_date)
        if to_date:
            collections = collections.filter(collection_date__lte=to_date)
            payments = payments.filter(payment_date__lte=to_date)

        total_collections = sum(collections.values_list("total_amount", flat=True), Decimal("0")).quantize(AMOUNT_QUANT)
        total_payments = sum(payments.values_list("amount", flat=True), Decimal("0")).quantize(AMOUNT_QUANT)

        return {
            "supplier_id": supplier_id,
            "from_date": from_date,
            "to_date": to_date,
            "total_collections": total_collections,
            "total_payments": total_payments,
            "outstanding_balance": (total_collections - total_payments).quantize(AMOUNT_QUANT),
        }
