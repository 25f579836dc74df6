import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("products", "0001_initial"),
        ("suppliers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Collection",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("version", models.PositiveIntegerField(default=1)),
                ("quantity", models.DecimalField(decimal_places=4, max_digits=15)),
                (
                    "unit",
                    models.CharField(
                        choices=[
                            ("kg", "Kilogram"),
                            ("g", "Gram"),
                            ("l", "Litre"),
                            ("ml", "Millilitre"),
                            ("unit", "Unit"),
                            ("lb", "Pound"),
                            ("oz", "Ounce"),
                            ("t", "Tonne"),
                        ],
                        max_length=16,
                    ),
                ),
                ("rate", models.DecimalField(decimal_places=4, max_digits=15)),
                ("total_amount", models.DecimalField(decimal_places=4, max_digits=18)),
                ("collection_date", models.DateField(db_index=True)),
                ("collection_time", models.TimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "collected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="collections_recorded",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="collections",
                        to="products.product",
                    ),
                ),
                (
                    "product_rate",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="collections",
                        to="products.productrate",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="collections",
                        to="suppliers.supplier",
                    ),
                ),
            ],
            options={
                "db_table": "collections_collection",
                "indexes": [
                    models.Index(fields=["supplier", "collection_date"], name="collection_supplier_date_idx"),
                    models.Index(fields=["product", "collection_date"], name="collection_product_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", Decimal("0"))),
                        name="ck_collection_quantity_positive",
                    ),
                ],
            },
        ),
    ]
