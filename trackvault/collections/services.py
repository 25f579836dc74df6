# trackvault/collections/services.py
from __future__ import annotations

import logging
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import ValidationError

from trackvault.audit.services import AuditService
from trackvault.collections.models import Collection
from trackvault.collections.selectors import get_collection
from trackvault.products.models import Product
from trackvault.products.rates import RateResolver, default_resolver
from trackvault.products.selectors import get_product
from trackvault.suppliers.selectors import get_supplier

logger = logging.getLogger(__name__)

AMOUNT_QUANT = Decimal("0.0001")
# numeric(15, 4) quantity and rate columns
MAX_FACTOR = Decimal(10) ** 11
# numeric(18, 4) total_amount column
MAX_TOTAL = Decimal(10) ** 14

UPDATABLE_FIELDS = {
    "supplier_id",
    "product_id",
    "quantity",
    "unit",
    "rate",
    "collection_date",
    "collection_time",
    "notes",
    "metadata",
}
# changing any of these re-prices the collection unless a rate is sent
PRICING_FIELDS = {"product_id", "unit", "collection_date"}


def _decimal(value: Any, field: str) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({field: "Must be a number."})
    if not d.is_finite():
        raise ValidationError({field: "Must be a number."})
    if d >= MAX_FACTOR:
        raise ValidationError({field: "Must be less than 100000000000."})
    return d


def _positive_decimal(value: Any, field: str) -> Decimal:
    d = _decimal(value, field)
    if d <= 0:
        raise ValidationError({field: "Must be greater than zero."})
    return d


def _total(quantity: Decimal, rate: Decimal) -> Decimal:
    total = (quantity * rate).quantize(AMOUNT_QUANT)
    if total >= MAX_TOTAL:
        raise ValidationError({"quantity": "Total amount (quantity x rate) is too large."})
    return total


def _check_unit(product: Product, unit: str) -> None:
    if not product.supports_unit(unit):
        raise ValidationError({"unit": f"Unit '{unit}' is not allowed for product {product.code}."})


def _price(
    product: Product,
    unit: str,
    on: date,
    rate: Any,
    resolver: RateResolver | None,
) -> tuple[Decimal, UUID | None]:
    """
    (rate, product_rate_id) for one collection line. An explicit rate is used
    as-is and not linked; otherwise the rate in effect on `on` is looked up.
    """
    if rate is not None:
        rate = _decimal(rate, "rate")
        if rate < 0:
            raise ValidationError({"rate": "Must be non-negative."})
        return rate, None

    current = (resolver or default_resolver()).find_current_rate(product.id, unit, on)
    if current is None:
        raise ValidationError({"rate": f"No active rate for product {product.code} in {unit} on {on.isoformat()}."})
    return current.rate, current.id


def _audit_metadata(collection: Collection) -> dict[str, Any]:
    return {
        "supplier_id": collection.supplier_id,
        "product_id": collection.product_id,
        "quantity": collection.quantity,
        "unit": collection.unit,
        "rate": collection.rate,
        "product_rate_id": collection.product_rate_id,
        "total_amount": collection.total_amount,
        "version": collection.version,
    }


class CollectionService:
    @staticmethod
    @transaction.atomic
    def create_collection(
        *,
        actor_user_id: int | None,
        supplier_id: UUID,
        product_id: UUID,
        quantity: Any,
        unit: str,
        collection_date: date,
        rate: Any = None,
        collection_time: Optional[time] = None,
        notes: str = "",
        metadata: dict | None = None,
        resolver: RateResolver | None = None,
    ) -> Collection:
        """
        Record a collection. Without an explicit `rate` the product rate in
        effect on `collection_date` is used and linked.
        """
        supplier = get_supplier(supplier_id=supplier_id)
        product = get_product(product_id=product_id)

        quantity = _positive_decimal(quantity, "quantity")
        _check_unit(product, unit)
        rate, product_rate_id = _price(product, unit, collection_date, rate, resolver)

        collection = Collection.objects.create(
            supplier=supplier,
            product=product,
            collected_by_id=actor_user_id,
            quantity=quantity,
            unit=unit,
            rate=rate,
            product_rate_id=product_rate_id,
            total_amount=_total(quantity, rate),
            collection_date=collection_date,
            collection_time=collection_time,
            notes=notes or "",
            metadata=metadata or {},
        )

        AuditService.log(
            event_code="collection.created",
            entity_type="Collection",
            entity_id=collection.id,
            actor_user_id=actor_user_id,
            metadata=_audit_metadata(collection),
        )
        logger.info(
            "Collection %s: supplier=%s product=%s %s %s @ %s = %s",
            collection.id,
            supplier.code,
            product.code,
            quantity,
            unit,
            rate,
            collection.total_amount,
        )
        return collection

    @staticmethod
    @transaction.atomic
    def update_collection(
        *,
        actor_user_id: int | None,
        collection_id: UUID,
        version: int,
        data: dict,
        resolver: RateResolver | None = None,
    ) -> Collection:
        """
        Partial update guarded by `version`.

        A `rate` in `data` is applied as an explicit rate; `rate: None` asks
        for the product rate in effect. When product, unit or date change
        and no rate is sent, the collection is re-priced the same way.
        """
        collection = get_collection(collection_id=collection_id, for_update=True)
        collection.check_version(version)

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}

        if "supplier_id" in updates:
            collection.supplier = get_supplier(supplier_id=updates["supplier_id"])
        if "product_id" in updates:
            collection.product = get_product(product_id=updates["product_id"])
        if "quantity" in updates:
            collection.quantity = _positive_decimal(updates["quantity"], "quantity")
        for field in ("unit", "collection_date", "collection_time"):
            if field in updates:
                setattr(collection, field, updates[field])
        if "notes" in updates:
            collection.notes = updates["notes"] or ""
        if "metadata" in updates:
            collection.metadata = updates["metadata"] or {}

        _check_unit(collection.product, collection.unit)

        if "rate" in updates or PRICING_FIELDS & updates.keys():
            collection.rate, collection.product_rate_id = _price(
                collection.product,
                collection.unit,
                collection.collection_date,
                updates.get("rate"),
                resolver,
            )
        collection.total_amount = _total(collection.quantity, collection.rate)
        collection.bump_version()
        collection.save()

        AuditService.log(
            event_code="collection.updated",
            entity_type="Collection",
            entity_id=collection.id,
            actor_user_id=actor_user_id,
            metadata={**_audit_metadata(collection), "updated_fields": sorted(updates)},
        )
        logger.info("Collection %s updated to version %s", collection.id, collection.version)
        return collection

    @staticmethod
    @transaction.atomic
    def delete_collection(*, actor_user_id: int | None, collection_id: UUID) -> None:
        collection = get_collection(collection_id=collection_id)
        metadata = {
            "supplier_id": str(collection.supplier_id),
            "product_id": str(collection.product_id),
            "total_amount": str(collection.total_amount),
        }
        collection.delete()

        AuditService.log(
            event_code="collection.deleted",
            entity_type="Collection",
            entity_id=collection_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )
