# trackvault/suppliers/models.py
from django.db import models

from trackvault.common.models import VersionedModel


class SupplierStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Supplier(VersionedModel):
    """
    A party that delivers products. Collections and payments hang off it.
    """
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)

    contact_person = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)

    address = models.TextField(blank=True)
    city = models.CharField(max_length=128, blank=True)
    state = models.CharField(max_length=128, blank=True)
    country = models.CharField(max_length=128, blank=True)
    postal_code = models.CharField(max_length=32, blank=True)

    status = models.CharField(
        max_length=16,
        choices=SupplierStatus.choices,
        default=SupplierStatus.ACTIVE,
        db_index=True,
    )

    class Meta:
        db_table = "suppliers_supplier"
        indexes = [
            models.Index(fields=["name", "code"], name="supplier_name_code_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
