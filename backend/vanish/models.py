import uuid

from django.db import models


class DeletionLog(models.Model):
    """
    Audit record of one account deletion.

    Outlives the user, so it keeps identifiers and a snapshot rather than
    foreign keys.
    """

    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    sovereign_id = models.UUIDField(db_index=True)
    email = models.EmailField()
    rank = models.CharField(max_length=16, null=True, blank=True)
    setup_status = models.CharField(max_length=16, blank=True)
    subscription_status = models.CharField(max_length=32, blank=True)

    deleted_by = models.UUIDField()
    self_deletion = models.BooleanField(default=False)
    reason = models.TextField(blank=True)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.IN_PROGRESS)
    mapping_deleted = models.BooleanField(default=False)
    provider_deleted = models.BooleanField(null=True)
    provider_error = models.TextField(blank=True)
    error = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.email} ({self.status})"
