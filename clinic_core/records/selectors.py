# clinic_core/records/selectors.py
from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from clinic_core.records.filters import MedicalRecordFilter
from clinic_core.records.models import MedicalRecord


def list_medical_records(*, patient_id: UUID, params: Mapping[str, Any] | None = None) -> QuerySet[MedicalRecord]:
    qs = MedicalRecord.objects.filter(patient_id=patient_id).select_related("created_by")

    fs = MedicalRecordFilter(data=params or {}, queryset=qs)
    if not fs.is_valid():
        raise ValidationError({k: [str(e) for e in v] for k, v in fs.errors.items()})

    return fs.qs.order_by("-date", "-created_at")
