from django.contrib import admin

from .models import DeletionLog


@admin.register(DeletionLog)
class DeletionLogAdmin(admin.ModelAdmin):
    list_display = ("email", "rank", "status", "self_deletion", "provider_deleted", "created_at")
    list_filter = ("status", "self_deletion")
    search_fields = ("email",)
    readonly_fields = [f.name for f in DeletionLog._meta.fields]
