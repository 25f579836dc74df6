# trackvault/products/rates/repositories.py
from __future__ import annotations

import contextlib
import uuid
from dataclasses import replace
from datetime import date
from typing import ContextManager, Iterator
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from trackvault.common.db import storage_errors
from trackvault.products.models import Product, ProductRate
from trackvault.products.rates.entities import ProductRateEntity


class ProductRepository:
    """Product existence checks the resolver depends on."""

    def exists(self, product_id: UUID) -> bool:
        raise NotImplementedError  # pragma: no cover

    def lock(self, product_id: UUID) -> None:
        """Serialize rate writes for one product until the surrounding transaction ends."""
        raise NotImplementedError  # pragma: no cover


class ProductRateRepository:
    """Rate persistence the resolver depends on."""

    def atomic(self) -> ContextManager:
        raise NotImplementedError  # pragma: no cover

    def save(self, entity: ProductRateEntity) -> ProductRateEntity:
        raise NotImplementedError  # pragma: no cover

    def get(self, rate_id: UUID) -> ProductRateEntity | None:
        raise NotImplementedError  # pragma: no cover

    def find_by_product(self, product_id: UUID, active_only: bool = False) -> list[ProductRateEntity]:
        raise NotImplementedError  # pragma: no cover

    def find_effective(self, product_id: UUID, unit: str, on: date) -> list[ProductRateEntity]:
        """Active rates of (product, unit) whose interval contains `on`, newest effective_from first."""
        raise NotImplementedError  # pragma: no cover

    def find_overlapping(
        self,
        product_id: UUID,
        unit: str,
        effective_from: date,
        effective_to: date | None,
        exclude_id: UUID | None = None,
    ) -> list[ProductRateEntity]:
        """Active rates of (product, unit) sharing at least one day with the given interval."""
        raise NotImplementedError  # pragma: no cover

    def get_current_rate(self, product_id: UUID, on: date, unit: str) -> ProductRateEntity | None:
        matches = self.find_effective(product_id, unit, on)
        return matches[0] if matches else None


# -------------------------------------------------------------------
# Django ORM implementations
# -------------------------------------------------------------------

def _to_entity(obj: ProductRate) -> ProductRateEntity:
    return ProductRateEntity(
        id=obj.id,
        product_id=obj.product_id,
        rate=obj.rate,
        unit=obj.unit,
        effective_from=obj.effective_from,
        effective_to=obj.effective_to,
        is_active=obj.is_active,
        notes=obj.notes,
        version=obj.version,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
    )


class DjangoProductRepository(ProductRepository):
    def exists(self, product_id: UUID) -> bool:
        with storage_errors("look up product"):
            return Product.objects.filter(id=product_id).exists()

    def lock(self, product_id: UUID) -> None:
        # Row lock on the owning product; no-op on SQLite, which serializes writers anyway.
        with storage_errors("lock product"):
            list(Product.objects.select_for_update().filter(id=product_id).values_list("id", flat=True))


class DjangoProductRateRepository(ProductRateRepository):
    FIELDS = ("rate", "unit", "effective_from", "effective_to", "is_active", "notes", "version")

    @contextlib.contextmanager
    def atomic(self) -> Iterator[None]:
        # covers queries in the block and the commit itself
        with storage_errors("write product rates"):
            with transaction.atomic():
                yield

    def save(self, entity: ProductRateEntity) -> ProductRateEntity:
        values = {f: getattr(entity, f) for f in self.FIELDS}
        with storage_errors("save product rate"):
            if entity.id is None:
                obj = ProductRate.objects.create(product_id=entity.product_id, **values)
            else:
                obj = ProductRate.objects.get(id=entity.id)
                for k, v in values.items():
                    setattr(obj, k, v)
                obj.save(update_fields=[*self.FIELDS, "updated_at"])
        return _to_entity(obj)

    def get(self, rate_id: UUID) -> ProductRateEntity | None:
        with storage_errors("load product rate"):
            obj = ProductRate.objects.filter(id=rate_id).first()
        return _to_entity(obj) if obj else None

    def find_by_product(self, product_id: UUID, active_only: bool = False) -> list[ProductRateEntity]:
        qs = ProductRate.objects.filter(product_id=product_id)
        if active_only:
            qs = qs.filter(is_active=True)
        with storage_errors("list product rates"):
            return [_to_entity(o) for o in qs.order_by("-effective_from", "unit", "-created_at")]

    def find_effective(self, product_id: UUID, unit: str, on: date) -> list[ProductRateEntity]:
        qs = (
            ProductRate.objects.filter(
                product_id=product_id,
                unit=unit,
                is_active=True,
                effective_from__lte=on,
            )
            .filter(Q(effective_to__isnull=True) | Q(effective_to__gte=on))
            .order_by("-effective_from", "-created_at")
        )
        with storage_errors("look up current rate"):
            return [_to_entity(o) for o in qs]

    def find_overlapping(
        self,
        product_id: UUID,
        unit: str,
        effective_from: date,
        effective_to: date | None,
        exclude_id: UUID | None = None,
    ) -> list[ProductRateEntity]:
        qs = ProductRate.objects.filter(product_id=product_id, unit=unit, is_active=True).filter(
            Q(effective_to__isnull=True) | Q(effective_to__gte=effective_from)
        )
        if effective_to is not None:
            qs = qs.filter(effective_from__lte=effective_to)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        with storage_errors("check overlapping rates"):
            return [_to_entity(o) for o in qs.order_by("effective_from")]


# -------------------------------------------------------------------
# In-memory implementations (tests, scripting)
# -------------------------------------------------------------------

class InMemoryProductRepository(ProductRepository):
    def __init__(self, product_ids=()) -> None:
        self.product_ids = set(product_ids)

    def exists(self, product_id: UUID) -> bool:
        return product_id in self.product_ids

    def lock(self, product_id: UUID) -> None:
        return None


class InMemoryProductRateRepository(ProductRateRepository):
    """Dict-backed store. Returns records in insertion order unless a query says otherwise."""

    def __init__(self) -> None:
        self.rows: dict[UUID, ProductRateEntity] = {}

    def atomic(self) -> ContextManager:
        return contextlib.nullcontext()

    def save(self, entity: ProductRateEntity) -> ProductRateEntity:
        now = timezone.now()
        if entity.id is None:
            entity = replace(entity, id=uuid.uuid4(), created_at=now, updated_at=now)
        else:
            entity = replace(entity, updated_at=now)
        self.rows[entity.id] = entity
        return entity

    def get(self, rate_id: UUID) -> ProductRateEntity | None:
        return self.rows.get(rate_id)

    def find_by_product(self, product_id: UUID, active_only: bool = False) -> list[ProductRateEntity]:
        rows = [r for r in self.rows.values() if r.product_id == product_id]
        if active_only:
            rows = [r for r in rows if r.is_active]
        return sorted(rows, key=lambda r: r.effective_from, reverse=True)

    def find_effective(self, product_id: UUID, unit: str, on: date) -> list[ProductRateEntity]:
        rows = [
            r for r in self.rows.values()
            if r.product_id == product_id and r.unit == unit and r.is_effective_on(on)
        ]
        # newest insert first among equal effective_from, matching the ORM ordering
        rows.reverse()
        return sorted(rows, key=lambda r: r.effective_from, reverse=True)

    def find_overlapping(
        self,
        product_id: UUID,
        unit: str,
        effective_from: date,
        effective_to: date | None,
        exclude_id: UUID | None = None,
    ) -> list[ProductRateEntity]:
        rows = [
            r for r in self.rows.values()
            if r.product_id == product_id
            and r.unit == unit
            and r.is_active
            and r.id != exclude_id
            and r.overlaps(effective_from, effective_to)
        ]
        return sorted(rows, key=lambda r: r.effective_from)
