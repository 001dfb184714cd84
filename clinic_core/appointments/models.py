# clinic_core/appointments/models.py
from django.conf import settings
from django.db import models

from clinic_core.common.models import UUIDModel


class AppointmentStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    NO_SHOW = "no_show", "No show"


class Appointment(UUIDModel):
    """
    A scheduled visit. Managed through the admin; the patient API only reads it.
    """
    patient = models.ForeignKey(
        "patients.Patient",
        on_delete=models.PROTECT,
        related_name="appointments",
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="doctor_appointments",
        null=True,
        blank=True,
    )
    scheduled_at = models.DateTimeField()
    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
        db_index=True,
    )
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "appointments_appointment"
        ordering = ["scheduled_at"]
        indexes = [
            models.Index(fields=["patient", "scheduled_at"], name="appt_patient_sched_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} @ {self.scheduled_at} ({self.status})"
