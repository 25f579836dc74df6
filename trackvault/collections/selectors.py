# trackvault/collections/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from trackvault.collections.models import Collection
from trackvault.common.api.exceptions import NotFoundError


def get_collection(*, collection_id: UUID, for_update: bool = False) -> Collection:
    qs = Collection.objects.select_related("supplier", "product")
    if for_update:
        qs = qs.select_for_update(of=("self",))
    collection = qs.filter(id=collection_id).first()
    if collection is None:
        raise NotFoundError(f"Collection with ID {collection_id} not found")
    return collection


def collections_filtered(
    *,
    supplier_id: UUID | None = None,
    product_id: UUID | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> QuerySet[Collection]:
    qs = Collection.objects.select_related("supplier", "product")

    if supplier_id:
        qs = qs.filter(supplier_id=supplier_id)
    if product_id:
        qs = qs.filter(product_id=product_id)
    if from_date:
        qs = qs.filter(collection_date__gte=from_date)
    if to_date:
        qs = qs.filter(collection_date__lte=to_date)

    return qs.order_by("-collection_date", "-created_at")
