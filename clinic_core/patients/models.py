# clinic_core/patients/models.py
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from clinic_core.common.models import AppendOnlyModel, ImmutableRecordError, UUIDModel


class PatientStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Gender(models.TextChoices):
    MALE = "male", "Male"
    FEMALE = "female", "Female"
    OTHER = "other", "Other"


class BloodType(models.TextChoices):
    A_POS = "A+", "A+"
    A_NEG = "A-", "A-"
    B_POS = "B+", "B+"
    B_NEG = "B-", "B-"
    AB_POS = "AB+", "AB+"
    AB_NEG = "AB-", "AB-"
    O_POS = "O+", "O+"
    O_NEG = "O-", "O-"


class Patient(UUIDModel):
    """
    Patient identity, demographics and medical-history summary.

    Never physically deleted: "delete" flips status to inactive.
    patient_id is assigned once at creation and cannot change afterwards.
    """
    patient_id = models.CharField(max_length=16, unique=True, editable=False)

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=16, choices=Gender.choices)

    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True, default="")

    # structured contact blocks; shapes enforced by the API serializers
    address = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    emergency_contact = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    insurance = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    status = models.CharField(
        max_length=16,
        choices=PatientStatus.choices,
        default=PatientStatus.ACTIVE,
        db_index=True,
    )

    # medical-history summary (diagnoses live in PatientDiagnosis)
    blood_type = models.CharField(max_length=3, choices=BloodType.choices, blank=True, default="")
    allergies = models.JSONField(default=list, blank=True)
    chronic_conditions = models.JSONField(default=list, blank=True)
    medical_notes = models.TextField(blank=True, default="")

    # weak reference: lookup key only, the clinician's lifecycle is independent
    assigned_doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="assigned_patients",
        null=True,
        blank=True,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="created_patients",
        null=True,
        blank=True,
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="updated_patients",
        null=True,
        blank=True,
    )
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="deleted_patients",
        null=True,
        blank=True,
    )
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["status", "created_at"], name="patients_status_created_idx"),
            models.Index(fields=["last_name", "first_name"], name="patients_name_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.last_name}, {self.first_name} ({self.patient_id})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        # read from __dict__ so a deferred field does not trigger a query
        instance._loaded_patient_id = instance.__dict__.get("patient_id")
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, "_loaded_patient_id", None)
        if loaded and self.patient_id != loaded:
            raise ImmutableRecordError("patient_id cannot be changed once assigned.")
        super().save(*args, **kwargs)
        self._loaded_patient_id = self.patient_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == PatientStatus.ACTIVE


class PatientDiagnosis(AppendOnlyModel):
    """
    One entry of the patient's diagnosis history. Append-only.
    """
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name="diagnoses")
    condition = models.TextField()
    diagnosed_at = models.DateTimeField(default=timezone.now)
    diagnosed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="patient_diagnoses",
        null=True,
        blank=True,
    )
    medical_record = models.ForeignKey(
        "records.MedicalRecord",
        on_delete=models.PROTECT,
        related_name="diagnoses",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "patients_patient_diagnosis"
        ordering = ["diagnosed_at", "id"]
        indexes = [
            models.Index(fields=["patient", "diagnosed_at"], name="patients_dx_patient_at_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id}: {self.condition[:40]}"


class PatientIdSequence(models.Model):
    """
    Persisted counter behind patient identifiers.
    Incremented with a row-locking UPDATE inside the create transaction.
    """
    name = models.CharField(max_length=64, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "patients_patient_id_sequence"

    def __str__(self) -> str:
        return f"{self.name}={self.value}"
