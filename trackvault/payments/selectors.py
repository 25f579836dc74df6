# trackvault/payments/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from trackvault.common.api.exceptions import NotFoundError
from trackvault.payments.models import Payment


def get_payment(*, payment_id: UUID, for_update: bool = False) -> Payment:
    qs = Payment.objects.select_related("supplier")
    if for_update:
        qs = qs.select_for_update(of=("self",))
    payment = qs.filter(id=payment_id).first()
    if payment is None:
        raise NotFoundError(f"Payment with ID {payment_id} not found")
    return payment


def payments_filtered(
    *,
    supplier_id: UUID | None = None,
    payment_type: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> QuerySet[Payment]:
    qs = Payment.objects.select_related("supplier")

    if supplier_id:
        qs = qs.filter(supplier_id=supplier_id)
    if payment_type:
        qs = qs.filter(payment_type=payment_type)
    if from_date:
        qs = qs.filter(payment_date__gte=from_date)
    if to_date:
        qs = qs.filter(payment_date__lte=to_date)

    return qs.order_by("-payment_date", "-created_at")
