# clinic_core/patients/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Prefetch, Q, QuerySet
from rest_framework.exceptions import NotFound

from clinic_core.appointments.models import Appointment
from clinic_core.patients.models import Patient, PatientDiagnosis

PATIENT_NOT_FOUND = "Patient not found."


def _as_uuid(value) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def get_patient_or_404(patient_id, *, queryset: QuerySet[Patient] | None = None) -> Patient:
    """
    Resolve a patient by internal key. Malformed keys are reported the same
    way as unknown ones.
    """
    pk = _as_uuid(patient_id)
    if pk is None:
        raise NotFound(PATIENT_NOT_FOUND)

    qs = queryset if queryset is not None else Patient.objects.all()
    try:
        return qs.get(pk=pk)
    except Patient.DoesNotExist:
        raise NotFound(PATIENT_NOT_FOUND)


def get_patient_detail(patient_id) -> Patient:
    qs = (
        Patient.objects.select_related("assigned_doctor", "assigned_doctor__clinic_profile")
        .prefetch_related(
            Prefetch("diagnoses", queryset=PatientDiagnosis.objects.order_by("diagnosed_at", "id")),
            Prefetch(
                "appointments",
                queryset=Appointment.objects.select_related("doctor").order_by("scheduled_at"),
            ),
        )
    )
    return get_patient_or_404(patient_id, queryset=qs)


def search_patients(*, search: str | None = None, status: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.all()

    if status:
        qs = qs.filter(status=status)

    qv = (search or "").strip()
    if qv:
        qs = qs.filter(
            Q(first_name__icontains=qv)
            | Q(last_name__icontains=qv)
            | Q(email__icontains=qv)
            | Q(phone__icontains=qv)
        )

    return qs.prefetch_related("diagnoses").order_by("-created_at", "-patient_id")


def email_in_use(email: str, *, exclude_pk: UUID | None = None) -> bool:
    qs = Patient.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()
