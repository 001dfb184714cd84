# clinic_core/records/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping

from django.db import transaction
from django.utils import timezone

from clinic_core.audit.models import AuditAction
from clinic_core.audit.services import AuditService, RequestOrigin
from clinic_core.common.permissions import RECORDS_CREATE, RECORDS_LIST, authorize
from clinic_core.iam.actors import Actor
from clinic_core.patients.models import Patient, PatientDiagnosis
from clinic_core.patients.selectors import get_patient_or_404
from clinic_core.records.models import MedicalRecord
from clinic_core.records.selectors import list_medical_records

logger = logging.getLogger(__name__)


class MedicalRecordService:
    @staticmethod
    def list_records(
        *,
        actor: Actor,
        patient_id,
        params: Mapping[str, Any] | None = None,
        origin: RequestOrigin | None = None,
    ) -> list[MedicalRecord]:
        authorize(actor, RECORDS_LIST)
        patient = get_patient_or_404(patient_id)

        records = list(list_medical_records(patient_id=patient.id, params=params))

        AuditService.log(
            actor_user_id=actor.user_id,
            patient_id=patient.id,
            action=AuditAction.VIEW_RECORDS,
            origin=origin,
        )
        return records

    @staticmethod
    def add_record(
        *,
        actor: Actor,
        patient_id,
        data: Mapping[str, Any],
        origin: RequestOrigin | None = None,
    ) -> MedicalRecord:
        """
        Record and diagnosis-history append commit together or not at all.
        """
        authorize(actor, RECORDS_CREATE)
        now = timezone.now()

        with transaction.atomic():
            patient = get_patient_or_404(patient_id, queryset=Patient.objects.select_for_update())

            record = MedicalRecord.objects.create(
                patient=patient,
                type=data["type"],
                date=now,
                diagnosis=data.get("diagnosis") or "",
                treatment=data.get("treatment") or "",
                medications=list(data.get("medications") or []),
                notes=data.get("notes") or "",
                attachments=list(data.get("attachments") or []),
                created_by_id=actor.user_id,
            )

            condition = record.diagnosis.strip()
            if condition:
                PatientDiagnosis.objects.create(
                    patient=patient,
                    condition=condition,
                    diagnosed_at=now,
                    diagnosed_by_id=actor.user_id,
                    medical_record=record,
                )
                patient.updated_by_id = actor.user_id
                patient.save(update_fields=["updated_by", "updated_at"])

        logger.info(
            "Medical record added: record_id=%s patient_id=%s type=%s by user_id=%s",
            record.id,
            patient.patient_id,
            record.type,
            actor.user_id,
        )

        AuditService.log(
            actor_user_id=actor.user_id,
            patient_id=patient.id,
            action=AuditAction.ADD_RECORD,
            origin=origin,
        )
        return record
