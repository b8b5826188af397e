from django.conf import settings
from django.db import models


class IdentityMapping(models.Model):
    """
    Durable link between one external provider identity and one
    sovereign user. Both sides are unique (one-to-one).

    PROTECT keeps a user from being deleted while still mapped; the
    deletion cascade removes the mapping first.
    """

    external_id = models.CharField(max_length=255, unique=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
    )
    provider = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "identity mapping"
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.provider}:{self.external_id}"

    @property
    def sovereign_id(self):
        return self.user.public_id
