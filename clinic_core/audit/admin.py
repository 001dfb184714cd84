# clinic_core/audit/admin.py
from django.contrib import admin

from clinic_core.audit.models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "action", "patient", "user", "ip_address")
    list_filter = ("action",)
    search_fields = ("patient__patient_id", "user__username", "ip_address")
    ordering = ("-timestamp",)
    readonly_fields = ("user", "patient", "action", "timestamp", "ip_address", "user_agent")

    # append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
