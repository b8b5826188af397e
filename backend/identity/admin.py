from django.contrib import admin

from .models import IdentityMapping


@admin.register(IdentityMapping)
class IdentityMappingAdmin(admin.ModelAdmin):
    # external_id stays off every admin page; resolving it is quarantined.
    list_display = ("user", "provider", "created_at")
    search_fields = ("user__email",)
    fields = ("user", "provider", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
