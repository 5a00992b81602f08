from __future__ import annotations

import uuid

import django.core.serializers.json
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="IdempotencyRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("client_request_id", models.CharField(max_length=64, unique=True)),
                (
                    "resource_type",
                    models.CharField(
                        choices=[
                            ("order_create", "Create order"),
                            ("add_item", "Add item"),
                            ("pay_cash", "Pay cash"),
                            ("pay_momo", "Pay MoMo"),
                            ("kitchen_status", "Kitchen status"),
                        ],
                        max_length=32,
                    ),
                ),
                ("response_status", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "response_json",
                    models.JSONField(
                        blank=True,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["resource_type", "created_at"], name="idempotency_type_created_idx"),
                ],
            },
        ),
    ]
