# clinic_core/patients/tests/test_patient_id_concurrency.py
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connection

from clinic_core.iam.actors import actor_from_user
from clinic_core.patients.identifiers import parse_sequence
from clinic_core.patients.models import Patient
from clinic_core.patients.services import PatientService

N = 16


@pytest.mark.django_db(transaction=True)
def test_concurrent_creates_get_distinct_identifiers(nurse_user):
    actor = actor_from_user(nurse_user)

    def create(i):
        try:
            patient = PatientService.create_patient(
                actor=actor,
                data={
                    "first_name": f"Concurrent{i}",
                    "last_name": "Patient",
                    "date_of_birth": "1990-01-01",
                    "gender": "other",
                    "email": f"concurrent{i}@example.com",
                },
            )
            return patient.patient_id
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(create, range(N)))

    assert len(set(ids)) == N
    assert sorted(parse_sequence(pid) for pid in ids) == list(range(1, N + 1))
    assert Patient.objects.count() == N
