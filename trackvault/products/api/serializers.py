# trackvault/products/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from trackvault.products.models import Product, ProductStatus, Unit


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    base_unit = serializers.ChoiceField(choices=Unit.choices)
    allowed_units = serializers.ListField(
        child=serializers.ChoiceField(choices=Unit.choices),
        required=False,
        default=list,
    )
    status = serializers.ChoiceField(choices=ProductStatus.choices, required=False, default=ProductStatus.ACTIVE)
    metadata = serializers.JSONField(required=False, default=dict)


class ProductUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    name = serializers.CharField(max_length=255, required=False)
    code = serializers.CharField(max_length=50, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    base_unit = serializers.ChoiceField(choices=Unit.choices, required=False)
    allowed_units = serializers.ListField(child=serializers.ChoiceField(choices=Unit.choices), required=False)
    status = serializers.ChoiceField(choices=ProductStatus.choices, required=False)
    metadata = serializers.JSONField(required=False)
    version = serializers.IntegerField(
        min_value=1,
        required=False,
        help_text="Version the client last read; a stale value is rejected with 409.",
    )

    def validate(self, attrs):
        if not set(attrs) - {"version"}:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class ProductSerializer(serializers.ModelSerializer):
    units = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "code",
            "description",
            "base_unit",
            "allowed_units",
            "units",
            "status",
            "metadata",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_units(self, obj) -> list[str]:
        return obj.units()


class ProductRateSerializer(serializers.Serializer):
    """
    Output shape for ProductRateEntity (not a ModelSerializer: the resolver
    hands back dataclasses).
    """
    id = serializers.UUIDField()
    product_id = serializers.UUIDField()
    rate = serializers.DecimalField(max_digits=15, decimal_places=4)
    unit = serializers.CharField()
    effective_from = serializers.DateField()
    effective_to = serializers.DateField(allow_null=True)
    is_active = serializers.BooleanField()
    notes = serializers.CharField(allow_blank=True)
    version = serializers.IntegerField()
    created_at = serializers.DateTimeField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class ProductRateCreateSerializer(serializers.Serializer):
    rate = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)
    unit = serializers.ChoiceField(choices=Unit.choices)
    effective_from = serializers.DateField()
    effective_to = serializers.DateField(required=False, allow_null=True, default=None)
    is_active = serializers.BooleanField(required=False, default=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        effective_to = attrs.get("effective_to")
        if effective_to is not None and effective_to < attrs["effective_from"]:
            raise serializers.ValidationError({"effective_to": "Must not be before effective_from."})
        return attrs


class ProductRateSupersedeSerializer(serializers.Serializer):
    rate = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)
    unit = serializers.ChoiceField(choices=Unit.choices)
    effective_from = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class SupersedeResultSerializer(serializers.Serializer):
    rate = ProductRateSerializer()
    closed = ProductRateSerializer(many=True)
