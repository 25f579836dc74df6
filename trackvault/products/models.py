# trackvault/products/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.db.models import F, Q

from trackvault.common.models import VersionedModel


class Unit(models.TextChoices):
    KG = "kg", "Kilogram"
    G = "g", "Gram"
    L = "l", "Litre"
    ML = "ml", "Millilitre"
    UNIT = "unit", "Unit"
    LB = "lb", "Pound"
    OZ = "oz", "Ounce"
    T = "t", "Tonne"


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(VersionedModel):
    """
    Something suppliers deliver. Priced per unit through ProductRate.
    """
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)

    base_unit = models.CharField(max_length=16, choices=Unit.choices)
    # extra units a collection may be recorded in; base_unit is always allowed
    allowed_units = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=16,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
        db_index=True,
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "products_product"
        indexes = [
            models.Index(fields=["name", "code"], name="product_name_code_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"

    def units(self) -> list[str]:
        units = [self.base_unit]
        for u in self.allowed_units or []:
            if u not in units:
                units.append(u)
        return units

    def supports_unit(self, unit: str) -> bool:
        return unit in self.units()


class ProductRate(VersionedModel):
    """
    Time-versioned price of a product in one unit.

    Interval is [effective_from, effective_to], both inclusive; no effective_to
    means open-ended. Active intervals of the same (product, unit) must not
    overlap (enforced by RateResolver under a product row lock).
    """
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="rates")

    rate = models.DecimalField(max_digits=15, decimal_places=4)
    unit = models.CharField(max_length=16, choices=Unit.choices)

    effective_from = models.DateField()
    effective_to = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = "products_product_rate"
        constraints = [
            models.CheckConstraint(
                condition=Q(rate__gte=Decimal("0")),
                name="ck_product_rate_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(effective_to__isnull=True) | Q(effective_to__gte=F("effective_from")),
                name="ck_product_rate_interval_order",
            ),
        ]
        indexes = [
            models.Index(fields=["product", "unit", "effective_from"], name="rate_product_unit_from_idx"),
            models.Index(fields=["is_active"], name="rate_is_active_idx"),
        ]

    def __str__(self) -> str:
        until = self.effective_to.isoformat() if self.effective_to else "open"
        return f"{self.product_id} {self.rate}/{self.unit} [{self.effective_from.isoformat()} .. {until}]"
