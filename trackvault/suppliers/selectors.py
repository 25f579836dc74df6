# trackvault/suppliers/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from trackvault.common.api.exceptions import NotFoundError
from trackvault.suppliers.models import Supplier


def get_supplier(*, supplier_id: UUID, for_update: bool = False) -> Supplier:
    qs = Supplier.objects.select_for_update() if for_update else Supplier.objects.all()
    supplier = qs.filter(id=supplier_id).first()
    if supplier is None:
        raise NotFoundError(f"Supplier with ID {supplier_id} not found")
    return supplier


def search_suppliers(*, q: str | None = None, status: str | None = None) -> QuerySet[Supplier]:
    qs = Supplier.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(name__icontains=qv)
            | Q(code__icontains=qv)
            | Q(contact_person__icontains=qv)
            | Q(phone__icontains=qv)
            | Q(city__icontains=qv)
        )
    if status:
        qs = qs.filter(status=status)

    return qs.order_by("name")
