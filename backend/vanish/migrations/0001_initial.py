import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DeletionLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("sovereign_id", models.UUIDField(db_index=True)),
                ("email", models.EmailField(max_length=254)),
                ("rank", models.CharField(blank=True, max_length=16, null=True)),
                ("setup_status", models.CharField(blank=True, max_length=16)),
                ("subscription_status", models.CharField(blank=True, max_length=32)),
                ("deleted_by", models.UUIDField()),
                ("self_deletion", models.BooleanField(default=False)),
                ("reason", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("in_progress", "In progress"), ("completed", "Completed"), ("failed", "Failed")],
                        default="in_progress",
                        max_length=16,
                    ),
                ),
                ("mapping_deleted", models.BooleanField(default=False)),
                ("provider_deleted", models.BooleanField(null=True)),
                ("provider_error", models.TextField(blank=True)),
                ("error", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
