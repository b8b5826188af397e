from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Invitation, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "public_id", "rank")}),
        ("Profile", {"fields": ("first_name", "last_name", "avatar_url", "org_id", "setup_status")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Important dates", {"fields": ("last_login", "date_joined", "login_count")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "rank", "password1", "password2")}),
    )
    readonly_fields = ("public_id", "login_count")
    list_display = ("email", "rank", "is_staff", "last_login")
    list_filter = ("rank", "is_staff", "is_active")
    search_fields = ("email", "first_name", "last_name")
    ordering = ("email",)


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ("email", "rank", "status", "invited_by", "created_at")
    list_filter = ("status", "rank")
    search_fields = ("email",)
