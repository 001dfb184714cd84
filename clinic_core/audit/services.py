# clinic_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_ipv46_address
from django.db import DatabaseError, transaction

from clinic_core.audit.models import AuditAction, AuditLogEntry
from clinic_core.common.api.exceptions import AuditWriteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestOrigin:
    """
    Where a request came from. Built by the HTTP layer and handed to services
    explicitly so the recorder never reaches for ambient request state.
    """
    ip_address: str | None = None
    user_agent: str = ""


def _clean_ip(value: str | None) -> str | None:
    value = (value or "").strip()
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except DjangoValidationError:
        return None
    return value


def origin_from_request(request) -> RequestOrigin:
    meta = request.META
    ip = meta.get("REMOTE_ADDR")

    if getattr(settings, "AUDIT_TRUST_X_FORWARDED_FOR", False):
        forwarded = meta.get("HTTP_X_FORWARDED_FOR", "")
        if forwarded:
            ip = forwarded.split(",")[0]

    return RequestOrigin(
        ip_address=_clean_ip(ip),
        user_agent=meta.get("HTTP_USER_AGENT", "") or "",
    )


class AuditService:
    """
    Central audit writer for patient access.

    Callers invoke log() only after their primary effect has committed. The
    entry is written in its own savepoint: a failure here never undoes the
    primary effect, it is logged as CRITICAL and raised as AuditWriteError.
    """

    @staticmethod
    def log(
        *,
        actor_user_id: int,
        patient_id: UUID,
        action: str,
        origin: RequestOrigin | None = None,
    ) -> AuditLogEntry:
        if action not in AuditAction.values:
            raise ValueError(f"Unknown audit action: {action!r}")

        origin = origin or RequestOrigin()

        try:
            with transaction.atomic():
                return AuditLogEntry.objects.create(
                    user_id=actor_user_id,
                    patient_id=patient_id,
                    action=action,
                    ip_address=origin.ip_address,
                    user_agent=origin.user_agent,
                )
        except DatabaseError as exc:
            logger.critical(
                "Audit write failed (action=%s, patient_id=%s, user_id=%s); primary effect stands",
                action,
                patient_id,
                actor_user_id,
                exc_info=exc,
            )
            raise AuditWriteError() from exc
