# clinic_core/patients/services.py
from __future__ import annotations

import logging
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic_core.audit.models import AuditAction
from clinic_core.audit.services import AuditService, RequestOrigin
from clinic_core.common.api.exceptions import ConflictError
from clinic_core.common.api.pagination import Page, paginate_queryset
from clinic_core.common.permissions import (
    PATIENTS_CREATE,
    PATIENTS_DELETE,
    PATIENTS_LIST,
    PATIENTS_RETRIEVE,
    PATIENTS_UPDATE,
    authorize,
)
from clinic_core.iam.actors import Actor
from clinic_core.patients import selectors
from clinic_core.patients.identifiers import allocate_patient_id
from clinic_core.patients.models import Patient, PatientStatus

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Patient with this email already exists."

CREATE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "email",
    "phone",
    "address",
    "emergency_contact",
    "insurance",
    "blood_type",
    "allergies",
    "chronic_conditions",
    "medical_notes",
})

# Anything outside this set is dropped silently on update.
UPDATABLE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "emergency_contact",
    "insurance",
    "status",
})


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


class PatientService:
    """
    Patient lifecycle. Every public method re-checks the role policy for the
    actor it is given, then performs its effect, then writes the audit entry.
    """

    @staticmethod
    def search_patients(
        *,
        actor: Actor,
        search: str | None = None,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        authorize(actor, PATIENTS_LIST)
        qs = selectors.search_patients(search=search, status=status)
        return paginate_queryset(qs, page=page, limit=limit)

    @staticmethod
    def get_patient(*, actor: Actor, patient_id, origin: RequestOrigin | None = None) -> Patient:
        authorize(actor, PATIENTS_RETRIEVE)
        patient = selectors.get_patient_detail(patient_id)

        AuditService.log(
            actor_user_id=actor.user_id,
            patient_id=patient.id,
            action=AuditAction.VIEW,
            origin=origin,
        )
        return patient

    @staticmethod
    def create_patient(*, actor: Actor, data: dict[str, Any], origin: RequestOrigin | None = None) -> Patient:
        authorize(actor, PATIENTS_CREATE)

        fields = {k: v for k, v in (data or {}).items() if k in CREATE_FIELDS}
        email = _normalize_email(fields.get("email", ""))
        fields["email"] = email

        try:
            with transaction.atomic():
                # checked before allocation so a duplicate never consumes a number
                if selectors.email_in_use(email):
                    raise ConflictError(DUPLICATE_EMAIL)

                patient = Patient(
                    **fields,
                    patient_id=allocate_patient_id(),
                    assigned_doctor_id=actor.user_id if actor.is_doctor else None,
                    created_by_id=actor.user_id,
                    updated_by_id=actor.user_id,
                )
                patient.save()
        except IntegrityError:
            # lost a race with a concurrent create of the same email
            if selectors.email_in_use(email):
                raise ConflictError(DUPLICATE_EMAIL)
            raise

        logger.info("Patient created: patient_id=%s by user_id=%s", patient.patient_id, actor.user_id)

        AuditService.log(
            actor_user_id=actor.user_id,
            patient_id=patient.id,
            action=AuditAction.CREATE,
            origin=origin,
        )
        return patient

    @staticmethod
    def update_patient(
        *,
        actor: Actor,
        patient_id,
        data: dict[str, Any],
        origin: RequestOrigin | None = None,
    ) -> Patient:
        authorize(actor, PATIENTS_UPDATE)

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        if "email" in updates:
            updates["email"] = _normalize_email(updates["email"])

        try:
            with transaction.atomic():
                patient = selectors.get_patient_or_404(patient_id)

                if "email" in updates and selectors.email_in_use(updates["email"], exclude_pk=patient.pk):
                    raise ConflictError(DUPLICATE_EMAIL)

                for k, v in updates.items():
                    setattr(patient, k, v)
                patient.updated_by_id = actor.user_id
                patient.save()
        except IntegrityError:
            if "email" in updates and selectors.email_in_use(updates["email"], exclude_pk=patient.pk):
                raise ConflictError(DUPLICATE_EMAIL)
            raise

        logger.info(
            "Patient updated: patient_id=%s by user_id=%s fields=%s",
            patient.patient_id,
            actor.user_id,
            sorted(updates.keys()),
        )

        AuditService.log(
            actor_user_id=actor.user_id,
            patient_id=patient.id,
            action=AuditAction.UPDATE,
            origin=origin,
        )
        return selectors.get_patient_detail(patient.id)

    @staticmethod
    def soft_delete_patient(*, actor: Actor, patient_id, origin: RequestOrigin | None = None) -> Patient:
        """
        Deactivate a patient. The row is kept: it stays retrievable and its
        audit history keeps pointing at it.
        """
        authorize(actor, PATIENTS_DELETE)

        with transaction.atomic():
            patient = selectors.get_patient_or_404(patient_id)
            patient.status = PatientStatus.INACTIVE
            patient.deleted_at = timezone.now()
            patient.deleted_by_id = actor.user_id
            patient.updated_by_id = actor.user_id
            patient.save(update_fields=["status", "deleted_at", "deleted_by", "updated_by", "updated_at"])

        logger.info("Patient deactivated: patient_id=%s by user_id=%s", patient.patient_id, actor.user_id)

        AuditService.log(
            actor_user_id=actor.user_id,
            patient_id=patient.id,
            action=AuditAction.DELETE,
            origin=origin,
        )
        return patient
