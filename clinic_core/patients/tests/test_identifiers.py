# clinic_core/patients/tests/test_identifiers.py
from datetime import datetime

import pytest
from django.db import transaction

from clinic_core.common.models import ImmutableRecordError
from clinic_core.patients.identifiers import (
    SEQUENCE_NAME,
    allocate_patient_id,
    format_patient_id,
    parse_sequence,
)
from clinic_core.patients.models import Patient, PatientIdSequence


def _patient(patient_id, email):
    return Patient.objects.create(
        patient_id=patient_id,
        first_name="Seed",
        last_name="Patient",
        date_of_birth="1980-05-05",
        gender="male",
        email=email,
    )


def test_format_patient_id():
    assert format_patient_id(1, year=2025) == "PT25000001"
    assert format_patient_id(123456, year=2031) == "PT31123456"
    assert format_patient_id(7, year=2100) == "PT00000007"
    assert format_patient_id(7, year=2025, prefix="PX") == "PX25000007"


def test_format_patient_id_rejects_out_of_range():
    with pytest.raises(ValueError):
        format_patient_id(0, year=2025)
    with pytest.raises(OverflowError):
        format_patient_id(1_000_000, year=2025)


def test_prefix_comes_from_settings(settings):
    settings.PATIENT_ID_PREFIX = "CL"
    assert format_patient_id(3, year=2025) == "CL25000003"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("PT25000041", 41),
        ("PT24999999", 999999),
        ("legacy-12", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_sequence(value, expected):
    assert parse_sequence(value) == expected


@pytest.mark.django_db
def test_first_identifier_is_sequence_one():
    with transaction.atomic():
        pid = allocate_patient_id(now=datetime(2025, 3, 1, 9, 0))
    assert pid == "PT25000001"
    assert PatientIdSequence.objects.get(name=SEQUENCE_NAME).value == 1


@pytest.mark.django_db
def test_counter_is_seeded_from_latest_patient():
    _patient("PT24000041", "seed@example.com")

    with transaction.atomic():
        pid = allocate_patient_id(now=datetime(2025, 1, 2))
    assert pid == "PT25000042"


@pytest.mark.django_db
def test_sequence_is_not_reset_by_new_year():
    with transaction.atomic():
        first = allocate_patient_id(now=datetime(2025, 12, 31, 23, 59))
    with transaction.atomic():
        second = allocate_patient_id(now=datetime(2026, 1, 1, 0, 1))

    assert first == "PT25000001"
    assert second == "PT26000002"


@pytest.mark.django_db
def test_rolled_back_allocation_returns_its_number():
    class Boom(Exception):
        pass

    with pytest.raises(Boom):
        with transaction.atomic():
            allocate_patient_id(now=datetime(2025, 6, 1))
            raise Boom()

    with transaction.atomic():
        pid = allocate_patient_id(now=datetime(2025, 6, 1))
    assert pid == "PT25000001"


@pytest.mark.django_db(transaction=True)
def test_allocation_outside_transaction_is_refused():
    with pytest.raises(RuntimeError):
        allocate_patient_id()


@pytest.mark.django_db
def test_patient_id_is_immutable():
    p = _patient("PT25000001", "immutable@example.com")

    p.patient_id = "PT25000999"
    with pytest.raises(ImmutableRecordError):
        p.save()

    reloaded = Patient.objects.get(pk=p.pk)
    reloaded.patient_id = "PT25000998"
    with pytest.raises(ImmutableRecordError):
        reloaded.save()
