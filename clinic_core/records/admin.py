from django.contrib import admin

from clinic_core.records.models import MedicalRecord


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ("patient", "type", "date", "created_by", "created_at")
    list_filter = ("type",)
    search_fields = ("patient__patient_id", "patient__last_name", "diagnosis")
    ordering = ("-date",)
    readonly_fields = (
        "patient",
        "type",
        "date",
        "diagnosis",
        "treatment",
        "medications",
        "notes",
        "attachments",
        "created_by",
        "created_at",
    )

    # records are immutable
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
