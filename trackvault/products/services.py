# trackvault/products/services.py
from __future__ import annotations

from typing import Any
from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from trackvault.audit.services import AuditService
from trackvault.common.api.exceptions import ConflictError
from trackvault.common.db import atomic_write
from trackvault.products.models import Product, Unit
from trackvault.products.rates import ProductRateEntity, RateResolver, SupersedeResult, default_resolver
from trackvault.products.selectors import get_product

DUPLICATE_CODE_MSG = "Product code already exists."

UPDATABLE_FIELDS = {"name", "code", "description", "base_unit", "allowed_units", "status", "metadata"}


def _clean_units(base_unit: str, allowed_units: list[str] | None) -> list[str]:
    valid = set(Unit.values)
    if base_unit not in valid:
        raise ValidationError({"base_unit": f"Unknown unit '{base_unit}'."})

    units: list[str] = []
    for u in allowed_units or []:
        if u not in valid:
            raise ValidationError({"allowed_units": f"Unknown unit '{u}'."})
        if u not in units:
            units.append(u)
    return units


class ProductService:
    @staticmethod
    def create_product(
        *,
        actor_user_id: int | None,
        name: str,
        code: str,
        base_unit: str,
        allowed_units: list[str] | None = None,
        description: str = "",
        status: str | None = None,
        metadata: dict | None = None,
    ) -> Product:
        name = (name or "").strip()
        code = (code or "").strip()
        if not name:
            raise ValidationError({"name": "Product name cannot be empty."})
        if not code:
            raise ValidationError({"code": "Product code cannot be empty."})

        fields: dict[str, Any] = {
            "name": name,
            "code": code,
            "description": description or "",
            "base_unit": base_unit,
            "allowed_units": _clean_units(base_unit, allowed_units),
            "metadata": metadata or {},
        }
        if status:
            fields["status"] = status

        try:
            with transaction.atomic():
                product = Product.objects.create(**fields)
        except IntegrityError:
            raise ValidationError({"code": DUPLICATE_CODE_MSG})

        AuditService.log(
            event_code="product.created",
            entity_type="Product",
            entity_id=product.id,
            actor_user_id=actor_user_id,
            metadata={"code": code, "base_unit": base_unit},
        )
        return product

    @staticmethod
    @transaction.atomic
    def update_product(*, actor_user_id: int | None, product_id: UUID, data: dict) -> Product:
        """
        Partial update. `data["version"]`, when sent, must match the stored version.
        """
        product = get_product(product_id=product_id, for_update=True)
        product.check_version((data or {}).get("version"))

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        if "name" in updates and not (updates["name"] or "").strip():
            raise ValidationError({"name": "Product name cannot be empty."})
        if "code" in updates and not (updates["code"] or "").strip():
            raise ValidationError({"code": "Product code cannot be empty."})

        if "base_unit" in updates or "allowed_units" in updates:
            updates["allowed_units"] = _clean_units(
                updates.get("base_unit", product.base_unit),
                updates.get("allowed_units", product.allowed_units),
            )

        for k, v in updates.items():
            setattr(product, k, v)
        product.bump_version()

        try:
            with transaction.atomic():
                product.save()
        except IntegrityError:
            raise ValidationError({"code": DUPLICATE_CODE_MSG})

        AuditService.log(
            event_code="product.updated",
            entity_type="Product",
            entity_id=product.id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(updates.keys()), "version": product.version},
        )
        return product

    @staticmethod
    @transaction.atomic
    def delete_product(*, actor_user_id: int | None, product_id: UUID) -> None:
        product = get_product(product_id=product_id)
        code = product.code

        if product.collections.exists():
            raise ConflictError("Product has collections and cannot be deleted.")

        product.delete()

        AuditService.log(
            event_code="product.deleted",
            entity_type="Product",
            entity_id=product_id,
            actor_user_id=actor_user_id,
            metadata={"code": code},
        )


def _rate_metadata(rate: ProductRateEntity) -> dict:
    return {
        "product_id": rate.product_id,
        "rate": rate.rate,
        "unit": rate.unit,
        "effective_from": rate.effective_from,
        "effective_to": rate.effective_to,
        "is_active": rate.is_active,
        "version": rate.version,
    }


class ProductRateService:
    """
    API-facing rate operations: unit checks against the product, then the
    resolver, then an audit event, all in one transaction.
    """

    def __init__(self, resolver: RateResolver | None = None) -> None:
        self.resolver = resolver or default_resolver()

    def _require_unit(self, product_id: UUID, unit: str) -> None:
        product = get_product(product_id=product_id)
        if not product.supports_unit(unit):
            raise ValidationError({"unit": f"Unit '{unit}' is not allowed for product {product.code}."})

    def _audit(self, event_code: str, rate: ProductRateEntity, actor_user_id: int | None, **extra) -> None:
        AuditService.log(
            event_code=event_code,
            entity_type="ProductRate",
            entity_id=rate.id,
            actor_user_id=actor_user_id,
            metadata={**_rate_metadata(rate), **extra},
        )

    @atomic_write("write product rates")
    def add_rate(self, *, actor_user_id: int | None, product_id: UUID, **fields) -> ProductRateEntity:
        self._require_unit(product_id, fields.get("unit"))
        rate = self.resolver.add_rate(product_id, **fields)
        self._audit("product_rate.created", rate, actor_user_id)
        return rate

    @atomic_write("write product rates")
    def supersede_rate(self, *, actor_user_id: int | None, product_id: UUID, **fields) -> SupersedeResult:
        self._require_unit(product_id, fields.get("unit"))
        result = self.resolver.supersede_rate(product_id, **fields)

        for closed in result.closed:
            self._audit("product_rate.closed", closed, actor_user_id, superseded_by=str(result.rate.id))
        self._audit("product_rate.created", result.rate, actor_user_id)
        return result

    @atomic_write("write product rates")
    def deactivate_rate(self, *, actor_user_id: int | None, rate_id: UUID) -> ProductRateEntity:
        before = self.resolver.get_rate(rate_id)
        rate = self.resolver.deactivate_rate(rate_id)
        if rate.version != before.version:
            self._audit("product_rate.deactivated", rate, actor_user_id)
        return rate

    @atomic_write("write product rates")
    def activate_rate(self, *, actor_user_id: int | None, rate_id: UUID) -> ProductRateEntity:
        before = self.resolver.get_rate(rate_id)
        rate = self.resolver.activate_rate(rate_id)
        if rate.version != before.version:
            self._audit("product_rate.activated", rate, actor_user_id)
        return rate
