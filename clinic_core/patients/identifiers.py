# clinic_core/patients/identifiers.py
"""
Patient identifier allocation.

Format: <prefix><yy><sequence>, e.g. PT25000001
  - prefix: settings.PATIENT_ID_PREFIX (two letters, "PT" by default)
  - yy: two-digit year at allocation time
  - sequence: 6-digit zero-padded, global across years (no yearly reset)

The sequence lives in a PatientIdSequence row. Allocation is a single
`UPDATE ... SET value = value + 1` executed inside the caller's transaction:
the row lock it takes serializes concurrent allocators across processes, and
a rolled back create gives its number back.
"""
from __future__ import annotations

import re
from datetime import datetime

from django.conf import settings
from django.db import connection
from django.db.models import F
from django.utils import timezone

from clinic_core.patients.models import Patient, PatientIdSequence

SEQUENCE_NAME = "patient_id"
SEQUENCE_WIDTH = 6

_TRAILING_SEQUENCE = re.compile(r"(\d{%d})$" % SEQUENCE_WIDTH)


def id_prefix() -> str:
    return getattr(settings, "PATIENT_ID_PREFIX", "PT")


def format_patient_id(sequence: int, *, year: int, prefix: str | None = None) -> str:
    if sequence < 1:
        raise ValueError("sequence must be >= 1")
    if sequence >= 10 ** SEQUENCE_WIDTH:
        raise OverflowError(f"patient_id sequence exhausted ({sequence})")
    return f"{prefix or id_prefix()}{year % 100:02d}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(patient_id: str | None) -> int | None:
    """
    Trailing 6 digits of an identifier, or None if it does not end in them.
    """
    m = _TRAILING_SEQUENCE.search((patient_id or "").strip())
    if not m:
        return None
    return int(m.group(1))


def _seed_value() -> int:
    """
    Starting point for a fresh counter: continue from the most recently
    created patient so a deployment that predates the counter keeps its numbering.
    """
    latest = (
        Patient.objects.order_by("-created_at")
        .values_list("patient_id", flat=True)
        .first()
    )
    return parse_sequence(latest) or 0


def next_sequence_value() -> int:
    if not connection.in_atomic_block:
        raise RuntimeError("Patient identifiers must be allocated inside transaction.atomic().")

    PatientIdSequence.objects.get_or_create(
        name=SEQUENCE_NAME,
        defaults={"value": _seed_value},
    )

    now = timezone.now()
    PatientIdSequence.objects.filter(name=SEQUENCE_NAME).update(value=F("value") + 1, updated_at=now)
    return PatientIdSequence.objects.values_list("value", flat=True).get(name=SEQUENCE_NAME)


def allocate_patient_id(*, now: datetime | None = None) -> str:
    now = now or timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    return format_patient_id(next_sequence_value(), year=now.year)
