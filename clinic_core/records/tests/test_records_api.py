# clinic_core/records/tests/test_records_api.py
import uuid
from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from clinic_core.audit.models import AuditLogEntry
from clinic_core.patients.models import PatientDiagnosis
from clinic_core.records.models import MedicalRecord

pytestmark = pytest.mark.django_db


def _record_payload(**overrides):
    payload = {
        "type": "consultation",
        "diagnosis": "Hypertension",
        "treatment": "Lifestyle changes",
        "medications": [{"name": "Lisinopril", "dosage": "10mg", "frequency": "daily", "duration": "30 days"}],
        "notes": "Recheck in a month",
        "attachments": [{"name": "ecg.pdf", "url": "https://files.example.com/ecg.pdf", "content_type": "application/pdf"}],
    }
    payload.update(overrides)
    return payload


def _seed_record(patient, user, *, when, type="consultation", diagnosis=""):
    return MedicalRecord.objects.create(
        patient=patient,
        type=type,
        date=when,
        diagnosis=diagnosis,
        created_by=user,
    )


def _aware(*args):
    return timezone.make_aware(datetime(*args))


# -----------------------------
# Add record
# -----------------------------
def test_doctor_adds_record_and_diagnosis(doctor_client, doctor_user, patient):
    res = doctor_client.post(f"/api/v1/patients/{patient.id}/records/", _record_payload(), format="json")
    assert res.status_code == 201, res.data

    body = res.json()
    assert body["message"] == "Medical record added successfully"
    data = body["data"]
    assert data["type"] == "consultation"
    assert data["medications"][0]["name"] == "Lisinopril"
    assert data["attachments"][0]["name"] == "ecg.pdf"
    assert data["created_by"] == {"id": doctor_user.id, "first_name": "Gregory", "last_name": "House"}

    diagnoses = list(PatientDiagnosis.objects.filter(patient=patient))
    assert len(diagnoses) == 1
    assert diagnoses[0].condition == "Hypertension"
    assert diagnoses[0].diagnosed_by_id == doctor_user.id
    assert str(diagnoses[0].medical_record_id) == data["id"]

    patient.refresh_from_db()
    assert patient.updated_by_id == doctor_user.id

    assert AuditLogEntry.objects.filter(patient=patient, action="add_record", user=doctor_user).count() == 1


def test_record_without_diagnosis_leaves_history_alone(doctor_client, patient):
    res = doctor_client.post(
        f"/api/v1/patients/{patient.id}/records/",
        _record_payload(type="lab_result", diagnosis="   "),
        format="json",
    )
    assert res.status_code == 201, res.data
    assert PatientDiagnosis.objects.filter(patient=patient).count() == 0


def test_diagnoses_accumulate_in_detail(doctor_client, nurse_client, patient):
    for condition in ("Asthma", "Migraine"):
        res = doctor_client.post(
            f"/api/v1/patients/{patient.id}/records/",
            _record_payload(diagnosis=condition),
            format="json",
        )
        assert res.status_code == 201

    detail = nurse_client.get(f"/api/v1/patients/{patient.id}/").json()["data"]
    assert [d["condition"] for d in detail["medical_history"]["diagnoses"]] == ["Asthma", "Migraine"]


@pytest.mark.parametrize("client_fixture", ["nurse_client", "admin_client"])
def test_non_doctor_cannot_add_record(request, client_fixture, patient):
    client = request.getfixturevalue(client_fixture)

    res = client.post(f"/api/v1/patients/{patient.id}/records/", _record_payload(), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"

    assert MedicalRecord.objects.count() == 0
    assert PatientDiagnosis.objects.count() == 0
    assert AuditLogEntry.objects.filter(action="add_record").count() == 0


def test_add_record_unknown_patient(doctor_client):
    res = doctor_client.post(f"/api/v1/patients/{uuid.uuid4()}/records/", _record_payload(), format="json")
    assert res.status_code == 404
    assert MedicalRecord.objects.count() == 0


def test_add_record_validates_type(doctor_client, patient):
    res = doctor_client.post(
        f"/api/v1/patients/{patient.id}/records/",
        _record_payload(type="astrology"),
        format="json",
    )
    assert res.status_code == 400
    assert "type" in res.json()["error"]["details"]


# -----------------------------
# List records
# -----------------------------
def test_list_records_newest_first_and_audited(nurse_client, nurse_user, doctor_user, patient):
    _seed_record(patient, doctor_user, when=_aware(2025, 1, 10, 9), diagnosis="old")
    _seed_record(patient, doctor_user, when=_aware(2025, 3, 10, 9), diagnosis="new")

    res = nurse_client.get(f"/api/v1/patients/{patient.id}/records/")
    assert res.status_code == 200, res.data

    body = res.json()
    assert body["success"] is True
    assert [r["diagnosis"] for r in body["data"]] == ["new", "old"]
    assert body["data"][0]["created_by"]["last_name"] == "House"

    entry = AuditLogEntry.objects.get(patient=patient, action="view_records")
    assert entry.user_id == nurse_user.id


def test_list_records_filters(nurse_client, doctor_user, patient):
    _seed_record(patient, doctor_user, when=_aware(2025, 1, 10, 9), type="lab_result", diagnosis="jan")
    _seed_record(patient, doctor_user, when=_aware(2025, 2, 15, 18), type="consultation", diagnosis="feb")
    _seed_record(patient, doctor_user, when=_aware(2025, 3, 20, 9), type="lab_result", diagnosis="mar")

    url = f"/api/v1/patients/{patient.id}/records/"

    by_type = nurse_client.get(url, {"type": "lab_result"}).json()["data"]
    assert [r["diagnosis"] for r in by_type] == ["mar", "jan"]

    # date-only end bound covers the whole day
    ranged = nurse_client.get(url, {"start_date": "2025-02-01", "end_date": "2025-02-15"}).json()["data"]
    assert [r["diagnosis"] for r in ranged] == ["feb"]

    by_datetime = nurse_client.get(url, {"start_date": "2025-02-15T19:00:00Z"}).json()["data"]
    assert [r["diagnosis"] for r in by_datetime] == ["mar"]


def test_list_records_rejects_bad_filters(nurse_client, patient):
    url = f"/api/v1/patients/{patient.id}/records/"

    res = nurse_client.get(url, {"start_date": "yesterday"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"
    assert "start_date" in res.json()["error"]["details"]

    res = nurse_client.get(url, {"type": "astrology"})
    assert res.status_code == 400


def test_list_records_unknown_patient_is_not_audited(nurse_client):
    res = nurse_client.get(f"/api/v1/patients/{uuid.uuid4()}/records/")
    assert res.status_code == 404
    assert AuditLogEntry.objects.filter(action="view_records").count() == 0


def test_other_patients_records_are_not_listed(nurse_client, doctor_user, patient):
    from clinic_core.patients.models import Patient

    other = Patient.objects.create(
        patient_id="PT25000900",
        first_name="Other",
        last_name="Person",
        date_of_birth="1970-01-01",
        gender="male",
        email="other.person@example.com",
    )
    _seed_record(other, doctor_user, when=timezone.now() - timedelta(days=1), diagnosis="not yours")

    data = nurse_client.get(f"/api/v1/patients/{patient.id}/records/").json()["data"]
    assert data == []
