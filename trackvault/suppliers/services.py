# trackvault/suppliers/services.py
from __future__ import annotations

from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from rest_framework.exceptions import ValidationError

from trackvault.audit.services import AuditService
from trackvault.common.api.exceptions import ConflictError
from trackvault.suppliers.models import Supplier
from trackvault.suppliers.selectors import get_supplier

DUPLICATE_CODE_MSG = "Supplier code already exists."

UPDATABLE_FIELDS = {
    "name",
    "code",
    "contact_person",
    "phone",
    "email",
    "address",
    "city",
    "state",
    "country",
    "postal_code",
    "status",
}


class SupplierService:
    @staticmethod
    def create_supplier(*, actor_user_id: int | None, name: str, code: str, **fields) -> Supplier:
        name = (name or "").strip()
        code = (code or "").strip()
        if not name:
            raise ValidationError({"name": "Supplier name cannot be empty."})
        if not code:
            raise ValidationError({"code": "Supplier code cannot be empty."})

        extra = {k: (v if v is not None else "") for k, v in fields.items() if k in UPDATABLE_FIELDS}

        try:
            with transaction.atomic():
                supplier = Supplier.objects.create(name=name, code=code, **extra)
        except IntegrityError:
            # code uniqueness is enforced by constraint; surface readable error.
            raise ValidationError({"code": DUPLICATE_CODE_MSG})

        AuditService.log(
            event_code="supplier.created",
            entity_type="Supplier",
            entity_id=supplier.id,
            actor_user_id=actor_user_id,
            metadata={"code": code},
        )
        return supplier

    @staticmethod
    @transaction.atomic
    def update_supplier(*, actor_user_id: int | None, supplier_id: UUID, data: dict) -> Supplier:
        supplier = get_supplier(supplier_id=supplier_id, for_update=True)
        supplier.check_version((data or {}).get("version"))

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        if "name" in updates and not (updates["name"] or "").strip():
            raise ValidationError({"name": "Supplier name cannot be empty."})
        if "code" in updates and not (updates["code"] or "").strip():
            raise ValidationError({"code": "Supplier code cannot be empty."})

        for k, v in updates.items():
            setattr(supplier, k, v if v is not None else "")
        supplier.bump_version()

        try:
            with transaction.atomic():
                supplier.save()
        except IntegrityError:
            raise ValidationError({"code": DUPLICATE_CODE_MSG})

        AuditService.log(
            event_code="supplier.updated",
            entity_type="Supplier",
            entity_id=supplier.id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(updates.keys()), "version": supplier.version},
        )
        return supplier

    @staticmethod
    @transaction.atomic
    def delete_supplier(*, actor_user_id: int | None, supplier_id: UUID) -> None:
        supplier = get_supplier(supplier_id=supplier_id)
        code = supplier.code

        try:
            supplier.delete()
        except ProtectedError:
            raise ConflictError("Supplier has collections or payments and cannot be deleted.")

        AuditService.log(
            event_code="supplier.deleted",
            entity_type="Supplier",
            entity_id=supplier_id,
            actor_user_id=actor_user_id,
            metadata={"code": code},
        )
