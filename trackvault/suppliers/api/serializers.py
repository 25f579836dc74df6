# trackvault/suppliers/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from trackvault.suppliers.models import Supplier, SupplierStatus


class SupplierCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.CharField(max_length=50)
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    state = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    postal_code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=SupplierStatus.choices, required=False, default=SupplierStatus.ACTIVE)


class SupplierUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    name = serializers.CharField(max_length=255, required=False)
    code = serializers.CharField(max_length=50, required=False)
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(max_length=128, required=False, allow_blank=True)
    state = serializers.CharField(max_length=128, required=False, allow_blank=True)
    country = serializers.CharField(max_length=128, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=32, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=SupplierStatus.choices, required=False)
    version = serializers.IntegerField(
        min_value=1,
        required=False,
        help_text="Version the client last read; a stale value is rejected with 409.",
    )

    def validate(self, attrs):
        if not set(attrs) - {"version"}:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            "id",
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
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SupplierBalanceSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    from_date = serializers.DateField(allow_null=True)
    to_date = serializers.DateField(allow_null=True)
    total_collections = serializers.DecimalField(max_digits=18, decimal_places=4)
    total_payments = serializers.DecimalField(max_digits=18, decimal_places=4)
    outstanding_balance = serializers.DecimalField(max_digits=18, decimal_places=4)
