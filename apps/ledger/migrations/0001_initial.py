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
            name="SystemState",
            fields=[
                (
                    "id",
                    models.PositiveSmallIntegerField(
                        default=1, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("total_records", models.PositiveBigIntegerField(default=0)),
                ("maintenance_active", models.BooleanField(default=False)),
                (
                    "block_height",
                    models.PositiveBigIntegerField(
                        default=0, help_text="Sequence counter advanced once per committed write."
                    ),
                ),
                ("initialized_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "administrator",
                    models.ForeignKey(
                        editable=False,
                        help_text="Chief medical officer. Fixed at initialisation.",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "ledger_system_state",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("id", 1)),
                        name="chk_system_state_singleton",
                    ),
                ],
            },
        ),
    ]
