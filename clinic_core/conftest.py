# clinic_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from clinic_core.iam.actors import actor_from_user
from clinic_core.iam.models import Role, UserProfile


def make_user(username, role=None, *, specialization="", first_name="", last_name=""):
    """
    Auth user plus (optionally) the clinic profile that carries its single role.
    """
    User = get_user_model()
    user = User.objects.create_user(
        username=username,
        password="testpass",
        first_name=first_name,
        last_name=last_name,
        is_active=True,
    )
    if role is not None:
        UserProfile.objects.create(user=user, role=role, specialization=specialization, is_active=True)
    return user


def patient_payload(**overrides):
    payload = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "date_of_birth": "1985-12-10",
        "gender": "female",
        "email": "ada@example.com",
        "phone": "555-0100",
        "address": {"street": "1 Main St", "city": "Springfield", "zip_code": "12345", "country": "US"},
        "emergency_contact": {"name": "Charles", "relationship": "friend", "phone": "555-0101"},
        "blood_type": "O+",
        "allergies": ["penicillin"],
        "chronic_conditions": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin_user(db):
    return make_user("admin1", Role.ADMIN, first_name="Alice", last_name="Admin")


@pytest.fixture
def doctor_user(db):
    return make_user(
        "doctor1",
        Role.DOCTOR,
        specialization="Cardiology",
        first_name="Gregory",
        last_name="House",
    )


@pytest.fixture
def nurse_user(db):
    return make_user("nurse1", Role.NURSE, first_name="Florence", last_name="Nightingale")


@pytest.fixture
def roleless_user(db):
    return make_user("visitor1")


def _client_for(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def doctor_client(doctor_user):
    return _client_for(doctor_user)


@pytest.fixture
def nurse_client(nurse_user):
    return _client_for(nurse_user)


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def doctor_actor(doctor_user):
    return actor_from_user(doctor_user)


@pytest.fixture
def nurse_actor(nurse_user):
    return actor_from_user(nurse_user)


@pytest.fixture
def admin_actor(admin_user):
    return actor_from_user(admin_user)


@pytest.fixture
def patient(nurse_actor):
    """
    A patient created through the service, so it has a real identifier.
    """
    from clinic_core.patients.services import PatientService

    return PatientService.create_patient(
        actor=nurse_actor,
        data={
            "first_name": "Test",
            "last_name": "Patient",
            "date_of_birth": "1990-01-01",
            "gender": "other",
            "email": "test.patient@example.com",
            "phone": "555-0199",
        },
    )
