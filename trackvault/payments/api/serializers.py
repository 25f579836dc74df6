# trackvault/payments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from trackvault.payments.models import Payment, PaymentType


class PaymentCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=4)
    payment_type = serializers.ChoiceField(choices=PaymentType.choices, required=False, default=PaymentType.PARTIAL)
    payment_date = serializers.DateField()
    payment_method = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    reference_number = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    metadata = serializers.JSONField(required=False, default=dict)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Payment amount must be > 0.")
        return value


class PaymentUpdateSerializer(serializers.Serializer):
    version = serializers.IntegerField(min_value=1)
    supplier_id = serializers.UUIDField(required=False)
    amount = serializers.DecimalField(max_digits=18, decimal_places=4, required=False)
    payment_type = serializers.ChoiceField(choices=PaymentType.choices, required=False)
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.CharField(max_length=32, required=False, allow_blank=True)
    reference_number = serializers.CharField(max_length=128, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    metadata = serializers.JSONField(required=False)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Payment amount must be > 0.")
        return value

    def validate(self, attrs):
        if not set(attrs) - {"version"}:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class PaymentSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "supplier",
            "supplier_name",
            "amount",
            "payment_type",
            "payment_date",
            "payment_method",
            "reference_number",
            "notes",
            "recorded_by",
            "metadata",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BalanceRequestSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    from_date = serializers.DateField(required=False, allow_null=True, default=None)
    to_date = serializers.DateField(required=False, allow_null=True, default=None)
