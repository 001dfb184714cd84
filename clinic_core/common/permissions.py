# clinic_core/common/permissions.py

from __future__ import annotations

import logging
from typing import Mapping

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from clinic_core.iam.actors import Actor, user_role
from clinic_core.iam.models import Role

logger = logging.getLogger(__name__)

ROLE_ADMIN = Role.ADMIN.value
ROLE_DOCTOR = Role.DOCTOR.value
ROLE_NURSE = Role.NURSE.value

# -----------------------------
# Operations
# -----------------------------
PATIENTS_LIST = "patients.list"
PATIENTS_RETRIEVE = "patients.retrieve"
PATIENTS_CREATE = "patients.create"
PATIENTS_UPDATE = "patients.update"
PATIENTS_DELETE = "patients.delete"
RECORDS_LIST = "records.list"
RECORDS_CREATE = "records.create"

CLINICAL_STAFF = frozenset({ROLE_ADMIN, ROLE_DOCTOR, ROLE_NURSE})

# Single source of truth: operation -> roles allowed to perform it.
# Exact membership only; admin has no implicit bypass.
POLICY: Mapping[str, frozenset[str]] = {
    PATIENTS_LIST: CLINICAL_STAFF,
    PATIENTS_RETRIEVE: CLINICAL_STAFF,
    PATIENTS_CREATE: CLINICAL_STAFF,
    PATIENTS_UPDATE: CLINICAL_STAFF,
    RECORDS_LIST: CLINICAL_STAFF,
    RECORDS_CREATE: frozenset({ROLE_DOCTOR}),
    PATIENTS_DELETE: frozenset({ROLE_ADMIN}),
}

DENIED_MESSAGE = "You do not have permission to perform this action."


def is_allowed(role: str | None, operation: str | None) -> bool:
    """
    Unknown operations and role-less users are denied.
    """
    if not role or not operation:
        return False
    allowed = POLICY.get(operation)
    if allowed is None:
        return False
    return role in allowed


def authorize(actor: Actor, operation: str) -> None:
    """
    Service-level gate. Raises PermissionDenied (403) before any data effect.
    """
    if not is_allowed(actor.role, operation):
        logger.warning(
            "Authorization denied: user_id=%s role=%s operation=%s",
            actor.user_id,
            actor.role,
            operation,
        )
        raise PermissionDenied(DENIED_MESSAGE)


class PolicyPermission(BasePermission):
    """
    DRF adapter over POLICY.

    Subclasses map view actions to operations:
        operation_per_action = {"list": PATIENTS_LIST, ...}

    Actions missing from the map are denied.
    """
    message = DENIED_MESSAGE

    operation_per_action: Mapping[str, str] = {}

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            return False

        action = getattr(view, "action", None)
        operation = self.operation_per_action.get(action)
        role = user_role(user)

        if is_allowed(role, operation):
            return True

        logger.warning(
            "Authorization denied: user_id=%s role=%s action=%s operation=%s",
            user.id,
            role,
            action,
            operation,
        )
        return False


class PatientPermission(PolicyPermission):
    """Permissions for patient and medical record endpoints"""
    operation_per_action = {
        "list": PATIENTS_LIST,
        "retrieve": PATIENTS_RETRIEVE,
        "create": PATIENTS_CREATE,
        "update": PATIENTS_UPDATE,
        "partial_update": PATIENTS_UPDATE,
        "destroy": PATIENTS_DELETE,
        # /patients/{id}/records/
        "records": RECORDS_LIST,
        "add_record": RECORDS_CREATE,
    }
