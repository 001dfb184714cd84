# clinic_core/audit/tests/test_audit_trail.py
import pytest
from django.db import DatabaseError
from django.test import RequestFactory

from clinic_core.audit.models import AuditLogEntry
from clinic_core.audit.services import AuditService, RequestOrigin, origin_from_request
from clinic_core.common.models import ImmutableRecordError
from clinic_core.conftest import patient_payload
from clinic_core.patients.models import Patient, PatientDiagnosis
from clinic_core.records.models import MedicalRecord

pytestmark = pytest.mark.django_db


def _failing_save(self, *args, **kwargs):
    raise DatabaseError("audit table unavailable")


def test_every_operation_leaves_one_entry(admin_client, doctor_client, nurse_client):
    created = nurse_client.post("/api/v1/patients/", patient_payload(), format="json")
    pid = created.json()["data"]["id"]

    nurse_client.get(f"/api/v1/patients/{pid}/")
    nurse_client.patch(f"/api/v1/patients/{pid}/", {"phone": "555-0300"}, format="json")
    doctor_client.post(f"/api/v1/patients/{pid}/records/", {"type": "consultation"}, format="json")
    nurse_client.get(f"/api/v1/patients/{pid}/records/")
    admin_client.delete(f"/api/v1/patients/{pid}/")

    actions = list(
        AuditLogEntry.objects.filter(patient_id=pid).order_by("id").values_list("action", flat=True)
    )
    assert actions == ["create", "view", "update", "add_record", "view_records", "delete"]


def test_entry_records_request_origin(nurse_client, patient):
    nurse_client.get(
        f"/api/v1/patients/{patient.id}/",
        REMOTE_ADDR="192.0.2.10",
        HTTP_USER_AGENT="ClinicApp/2.1",
    )

    entry = AuditLogEntry.objects.get(patient=patient, action="view")
    assert entry.ip_address == "192.0.2.10"
    assert entry.user_agent == "ClinicApp/2.1"
    assert entry.timestamp is not None


def test_forwarded_for_is_ignored_unless_trusted(settings):
    rf = RequestFactory()
    req = rf.get("/", REMOTE_ADDR="10.0.0.1", HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1")

    settings.AUDIT_TRUST_X_FORWARDED_FOR = False
    assert origin_from_request(req).ip_address == "10.0.0.1"

    settings.AUDIT_TRUST_X_FORWARDED_FOR = True
    assert origin_from_request(req).ip_address == "203.0.113.5"


def test_unparseable_address_is_dropped():
    req = RequestFactory().get("/", REMOTE_ADDR="not-an-ip")
    assert origin_from_request(req) == RequestOrigin(ip_address=None, user_agent="")


def test_unknown_action_is_rejected(nurse_user, patient):
    with pytest.raises(ValueError):
        AuditService.log(actor_user_id=nurse_user.id, patient_id=patient.id, action="export")


def test_audit_failure_keeps_created_patient(nurse_client, monkeypatch, caplog):
    monkeypatch.setattr(AuditLogEntry, "save", _failing_save)

    with caplog.at_level("CRITICAL", logger="clinic_core.audit.services"):
        res = nurse_client.post("/api/v1/patients/", patient_payload(), format="json")

    assert res.status_code == 500
    assert res.json()["success"] is False
    assert res.json()["error"]["code"] == "audit_failure"

    # the primary effect stands
    assert Patient.objects.filter(email="ada@example.com").exists()
    assert any(r.levelname == "CRITICAL" for r in caplog.records)


def test_audit_failure_keeps_added_record(doctor_client, patient, monkeypatch):
    monkeypatch.setattr(AuditLogEntry, "save", _failing_save)

    res = doctor_client.post(
        f"/api/v1/patients/{patient.id}/records/",
        {"type": "diagnosis", "diagnosis": "Type 2 diabetes"},
        format="json",
    )
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "audit_failure"

    assert MedicalRecord.objects.filter(patient=patient).count() == 1
    assert PatientDiagnosis.objects.filter(patient=patient, condition="Type 2 diabetes").count() == 1


def test_entries_are_append_only(nurse_client, patient):
    entry = AuditLogEntry.objects.filter(patient=patient).first()
    assert entry is not None

    entry.action = "view"
    with pytest.raises(ImmutableRecordError):
        entry.save()
    with pytest.raises(ImmutableRecordError):
        entry.delete()

    assert AuditLogEntry.objects.filter(pk=entry.pk, action="create").exists()


def test_records_and_diagnoses_are_append_only(doctor_client, patient):
    doctor_client.post(
        f"/api/v1/patients/{patient.id}/records/",
        {"type": "diagnosis", "diagnosis": "Gout"},
        format="json",
    )
    record = MedicalRecord.objects.get(patient=patient)
    dx = PatientDiagnosis.objects.get(patient=patient)

    record.notes = "edited"
    with pytest.raises(ImmutableRecordError):
        record.save()
    with pytest.raises(ImmutableRecordError):
        dx.delete()
