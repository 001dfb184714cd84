# clinic_core/records/models.py
import uuid

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from clinic_core.common.models import AppendOnlyModel


class MedicalRecordType(models.TextChoices):
    CONSULTATION = "consultation", "Consultation"
    DIAGNOSIS = "diagnosis", "Diagnosis"
    LAB_RESULT = "lab_result", "Lab result"
    PRESCRIPTION = "prescription", "Prescription"
    PROCEDURE = "procedure", "Procedure"
    VACCINATION = "vaccination", "Vaccination"
    IMAGING = "imaging", "Imaging"
    OTHER = "other", "Other"


class MedicalRecord(AppendOnlyModel):
    """
    A clinical entry attached to a patient. Immutable once written;
    corrections are made by adding a new record.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    patient = models.ForeignKey(
        "patients.Patient",
        on_delete=models.PROTECT,
        related_name="medical_records",
    )
    type = models.CharField(max_length=32, choices=MedicalRecordType.choices, db_index=True)
    date = models.DateTimeField(default=timezone.now)

    diagnosis = models.TextField(blank=True, default="")
    treatment = models.TextField(blank=True, default="")
    # [{name, dosage, frequency, duration}, ...]
    medications = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    notes = models.TextField(blank=True, default="")
    # [{name, url, content_type}, ...]
    attachments = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_medical_records",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "records_medical_record"
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["patient", "date"], name="records_patient_date_idx"),
            models.Index(fields=["patient", "type", "date"], name="records_patient_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} for {self.patient_id} on {self.date:%Y-%m-%d}"
