# trackvault/payments/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from trackvault.common.models import VersionedModel
from trackvault.suppliers.models import Supplier


class PaymentType(models.TextChoices):
    ADVANCE = "advance", "Advance"
    PARTIAL = "partial", "Partial"
    FINAL = "final", "Final"
    ADJUSTMENT = "adjustment", "Adjustment"


class Payment(VersionedModel):
    """
    Money paid to a supplier. Reduces the supplier's outstanding balance.
    """
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="payments")

    amount = models.DecimalField(max_digits=18, decimal_places=4)
    payment_type = models.CharField(max_length=16, choices=PaymentType.choices, default=PaymentType.PARTIAL)
    payment_date = models.DateField(db_index=True)

    payment_method = models.CharField(max_length=32, blank=True)  # cash/bank/mobile...
    reference_number = models.CharField(max_length=128, blank=True)
    notes = models.TextField(blank=True)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments_recorded",
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "payments_payment"
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=Decimal("0")), name="ck_payment_amount_positive"),
        ]
        indexes = [
            models.Index(fields=["supplier", "payment_date"], name="payment_supplier_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.supplier_id} {self.amount} ({self.payment_type}) on {self.payment_date.isoformat()}"
