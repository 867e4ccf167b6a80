import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="MedicalRecord",
            fields=[
                ("id", models.PositiveBigIntegerField(editable=False, primary_key=True, serialize=False)),
                ("category", models.CharField(editable=False, max_length=64)),
                ("data_volume", models.PositiveBigIntegerField(editable=False, help_text="Total quota.")),
                ("accessed_volume", models.PositiveBigIntegerField(default=0)),
                ("created_at_block", models.PositiveBigIntegerField(editable=False)),
                (
                    "is_active",
                    models.BooleanField(
                        default=True, help_text="Set to False on archival. Never set back to True."
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "physician",
                    models.ForeignKey(
                        editable=False,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="medical_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "medical_records",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["physician", "is_active"], name="idx_record_physician_active"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("data_volume__gt", 0)),
                        name="chk_record_data_volume_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("accessed_volume__lte", models.F("data_volume"))),
                        name="chk_record_accessed_within_quota",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PhysicianStats",
            fields=[
                (
                    "physician",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        primary_key=True,
                        related_name="physician_stats",
                        serialize=False,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                ("record_count", models.PositiveBigIntegerField(default=0)),
                ("total_data_managed", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "physician_stats",
                "verbose_name_plural": "physician stats",
            },
        ),
        migrations.CreateModel(
            name="AccessGrant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("can_access", models.BooleanField(default=True)),
                ("access_limit", models.PositiveBigIntegerField(default=0)),
                ("granted_at", models.DateTimeField(auto_now=True)),
                (
                    "record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="access_grants",
                        to="records.medicalrecord",
                    ),
                ),
                (
                    "staff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="medical_access_grants",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "access_grants",
                "indexes": [models.Index(fields=["staff"], name="idx_grant_staff")],
                "constraints": [
                    models.UniqueConstraint(fields=("record", "staff"), name="uq_grant_record_staff"),
                ],
            },
        ),
    ]
