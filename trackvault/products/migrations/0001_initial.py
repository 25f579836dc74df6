import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models

UNIT_CHOICES = [
    ("kg", "Kilogram"),
    ("g", "Gram"),
    ("l", "Litre"),
    ("ml", "Millilitre"),
    ("unit", "Unit"),
    ("lb", "Pound"),
    ("oz", "Ounce"),
    ("t", "Tonne"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("version", models.PositiveIntegerField(default=1)),
                ("name", models.CharField(max_length=255)),
                ("code", models.CharField(max_length=50, unique=True)),
                ("description", models.TextField(blank=True)),
                ("base_unit", models.CharField(choices=UNIT_CHOICES, max_length=16)),
                ("allowed_units", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        db_index=True,
                        default="active",
                        max_length=16,
                    ),
                ),
                ("metadata", models.JSONField(blank=True, default=dict)),
            ],
            options={
                "db_table": "products_product",
                "indexes": [models.Index(fields=["name", "code"], name="product_name_code_idx")],
            },
        ),
        migrations.CreateModel(
            name="ProductRate",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("version", models.PositiveIntegerField(default=1)),
                ("rate", models.DecimalField(decimal_places=4, max_digits=15)),
                ("unit", models.CharField(choices=UNIT_CHOICES, max_length=16)),
                ("effective_from", models.DateField()),
                ("effective_to", models.DateField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rates",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "db_table": "products_product_rate",
                "indexes": [
                    models.Index(fields=["product", "unit", "effective_from"], name="rate_product_unit_from_idx"),
                    models.Index(fields=["is_active"], name="rate_is_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("rate__gte", Decimal("0"))),
                        name="ck_product_rate_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("effective_to__isnull", True),
                            ("effective_to__gte", models.F("effective_from")),
                            _connector="OR",
                        ),
                        name="ck_product_rate_interval_order",
                    ),
                ],
            },
        ),
    ]
