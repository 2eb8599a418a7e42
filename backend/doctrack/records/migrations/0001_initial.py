from __future__ import annotations

import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="RecordDocument",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("record_type", models.CharField(max_length=32, db_index=True)),
                ("tracking_id", models.CharField(max_length=64)),
                ("status", models.CharField(max_length=16, db_index=True)),
                ("remarks", models.TextField(blank=True, default="")),
                ("remarks_history", models.JSONField(default=list, blank=True)),
                ("fields", models.JSONField(default=dict, blank=True)),
                ("date_time_in", models.DateTimeField()),
                ("date_time_out", models.DateTimeField(null=True, blank=True)),
                ("time_out_remarks", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "doctrack_records",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["record_type", "-created_at"], name="doctrack_records_type_idx"),
                ],
            },
        ),
    ]
