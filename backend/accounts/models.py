import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _

from ranks.hierarchy import Rank


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("rank", Rank.ADMIRAL)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Sovereign user: the application's own identity record.

    public_id is the sovereign id. It is the only user identifier that
    leaves the server; the external provider's id lives in
    identity.IdentityMapping and nowhere else.
    """

    class SetupStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETE = "complete", "Complete"

    username = None
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    email = models.EmailField("email address", unique=True)

    # Null means "no rank assigned" and fails every rank guard.
    rank = models.CharField(max_length=16, choices=Rank.choices, null=True, blank=True)

    # Profile fields mirrored into the session credential
    secondary_email = models.EmailField(null=True, blank=True)
    email_verified = models.BooleanField(default=False)
    avatar_url = models.URLField(max_length=500, null=True, blank=True)
    brand_logo_url = models.URLField(max_length=500, null=True, blank=True)
    setup_status = models.CharField(
        max_length=16, choices=SetupStatus.choices, default=SetupStatus.PENDING
    )
    subscription_status = models.CharField(max_length=32, default="free")
    business_country = models.CharField(max_length=2, null=True, blank=True)
    entity_name = models.CharField(max_length=255, null=True, blank=True)
    social_name = models.CharField(max_length=255, null=True, blank=True)
    phone_number = models.CharField(max_length=32, null=True, blank=True)
    org_id = models.CharField(max_length=64, null=True, blank=True)

    # Preferences
    theme_name = models.CharField(max_length=32, default="transtheme")
    theme_dark = models.BooleanField(default=False)
    miror_enchantment_enabled = models.BooleanField(default=True)
    miror_enchantment_timing = models.CharField(max_length=16, default="subtle")
    dashboard_layout = models.CharField(max_length=32, default="default")
    dashboard_widgets = models.JSONField(default=list, blank=True)

    login_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=["rank"], name="user_by_rank"),
        ]

    def __str__(self):
        return self.email

    @property
    def sovereign_id(self):
        return self.public_id


class Invitation(models.Model):
    """A pending grant of a rank to whoever first signs in with this email."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        REVOKED = "revoked", "Revoked"

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    email = models.EmailField()
    rank = models.CharField(max_length=16, choices=Rank.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invitations_sent",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Invitation")
        verbose_name_plural = _("Invitations")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email", "status"], name="invitation_email_status"),
        ]

    def __str__(self):
        return f"{self.email} ({self.rank}, {self.status})"
