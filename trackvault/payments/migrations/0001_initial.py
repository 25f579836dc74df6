import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("suppliers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("version", models.PositiveIntegerField(default=1)),
                ("amount", models.DecimalField(decimal_places=4, max_digits=18)),
                (
                    "payment_type",
                    models.CharField(
                        choices=[
                            ("advance", "Advance"),
                            ("partial", "Partial"),
                            ("final", "Final"),
                            ("adjustment", "Adjustment"),
                        ],
                        default="partial",
                        max_length=16,
                    ),
                ),
                ("payment_date", models.DateField(db_index=True)),
                ("payment_method", models.CharField(blank=True, max_length=32)),
                ("reference_number", models.CharField(blank=True, max_length=128)),
                ("notes", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "recorded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments_recorded",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="suppliers.supplier",
                    ),
                ),
            ],
            options={
                "db_table": "payments_payment",
                "indexes": [
                    models.Index(fields=["supplier", "payment_date"], name="payment_supplier_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", Decimal("0"))),
                        name="ck_payment_amount_positive",
                    ),
                ],
            },
        ),
    ]
