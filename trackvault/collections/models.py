# trackvault/collections/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from trackvault.common.models import VersionedModel
from trackvault.products.models import Product, ProductRate, Unit
from trackvault.suppliers.models import Supplier


class Collection(VersionedModel):
    """
    A quantity of product received from a supplier on a date, priced with the
    rate that applied then. `rate` is a snapshot; later rate changes do not
    touch existing collections.
    """
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="collections")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="collections")
    collected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="collections_recorded",
    )

    quantity = models.DecimalField(max_digits=15, decimal_places=4)
    unit = models.CharField(max_length=16, choices=Unit.choices)

    rate = models.DecimalField(max_digits=15, decimal_places=4)
    product_rate = models.ForeignKey(
        ProductRate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="collections",
    )
    total_amount = models.DecimalField(max_digits=18, decimal_places=4)

    collection_date = models.DateField(db_index=True)
    collection_time = models.TimeField(null=True, blank=True)

    notes = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "collections_collection"
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gt=Decimal("0")), name="ck_collection_quantity_positive"),
        ]
        indexes = [
            models.Index(fields=["supplier", "collection_date"], name="collection_supplier_date_idx"),
            models.Index(fields=["product", "collection_date"], name="collection_product_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.supplier_id} {self.quantity}{self.unit} on {self.collection_date.isoformat()}"
