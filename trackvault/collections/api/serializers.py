# trackvault/collections/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from trackvault.collections.models import Collection
from trackvault.products.models import Unit


class CollectionCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=15, decimal_places=4)
    unit = serializers.ChoiceField(choices=Unit.choices)
    collection_date = serializers.DateField()
    collection_time = serializers.TimeField(required=False, allow_null=True, default=None)
    rate = serializers.DecimalField(
        max_digits=15,
        decimal_places=4,
        min_value=0,
        required=False,
        allow_null=True,
        default=None,
        help_text="Omit to use the product rate in effect on collection_date.",
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    metadata = serializers.JSONField(required=False, default=dict)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Must be greater than zero.")
        return value


class CollectionUpdateSerializer(serializers.Serializer):
    """
    PATCH contract. `version` is required; send `rate: null` to re-price from
    the product rate in effect on the (new) collection date.
    """
    version = serializers.IntegerField(min_value=1)
    supplier_id = serializers.UUIDField(required=False)
    product_id = serializers.UUIDField(required=False)
    quantity = serializers.DecimalField(max_digits=15, decimal_places=4, required=False)
    unit = serializers.ChoiceField(choices=Unit.choices, required=False)
    collection_date = serializers.DateField(required=False)
    collection_time = serializers.TimeField(required=False, allow_null=True)
    rate = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    metadata = serializers.JSONField(required=False)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Must be greater than zero.")
        return value

    def validate(self, attrs):
        if not set(attrs) - {"version"}:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class CollectionSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = Collection
        fields = [
            "id",
            "supplier",
            "supplier_name",
            "product",
            "product_name",
            "collected_by",
            "quantity",
            "unit",
            "rate",
            "product_rate",
            "total_amount",
            "collection_date",
            "collection_time",
            "notes",
            "metadata",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
