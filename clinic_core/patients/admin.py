# clinic_core/patients/admin.py
from django.contrib import admin

from clinic_core.patients.models import Patient, PatientDiagnosis


class PatientDiagnosisInline(admin.TabularInline):
    model = PatientDiagnosis
    extra = 0
    can_delete = False
    readonly_fields = ("condition", "diagnosed_at", "diagnosed_by", "medical_record")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = (
        "patient_id",
        "last_name",
        "first_name",
        "email",
        "phone",
        "status",
        "assigned_doctor",
        "created_at",
    )
    list_filter = ("status", "gender")
    search_fields = ("patient_id", "first_name", "last_name", "email", "phone")
    readonly_fields = ("patient_id", "created_at", "updated_at", "deleted_at", "deleted_by")
    raw_id_fields = ("assigned_doctor", "created_by", "updated_by")
    ordering = ("-created_at",)
    inlines = [PatientDiagnosisInline]

    # created through PatientService so an identifier is allocated
    def has_add_permission(self, request):
        return False

    # patients are deactivated, never removed
    def has_delete_permission(self, request, obj=None):
        return False
