from django.contrib import admin

from clinic_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("patient", "doctor", "scheduled_at", "status")
    list_filter = ("status",)
    search_fields = ("patient__patient_id", "patient__last_name", "reason")
    raw_id_fields = ("patient", "doctor")
