# clinic_core/patients/api/serializers.py
from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers

from clinic_core.appointments.models import Appointment
from clinic_core.common.api.pagination import PageQuerySerializer
from clinic_core.patients.models import BloodType, Gender, Patient, PatientDiagnosis, PatientStatus


# -----------------------------
# Nested contact blocks (stored as JSON on Patient)
# -----------------------------
class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    relationship = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)


class InsuranceSerializer(serializers.Serializer):
    provider = serializers.CharField(max_length=200, required=False, allow_blank=True)
    policy_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    group_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    valid_until = serializers.DateField(required=False, allow_null=True)


def _validate_email(value: str) -> str:
    return value.strip().lower()


# -----------------------------
# Input
# -----------------------------
class PatientCreateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    date_of_birth = serializers.DateField()
    gender = serializers.ChoiceField(choices=Gender.choices)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")

    address = AddressSerializer(required=False)
    emergency_contact = EmergencyContactSerializer(required=False)
    insurance = InsuranceSerializer(required=False)

    blood_type = serializers.ChoiceField(choices=BloodType.choices, required=False, allow_blank=True)
    allergies = serializers.ListField(
        child=serializers.CharField(max_length=200), required=False, default=list
    )
    chronic_conditions = serializers.ListField(
        child=serializers.CharField(max_length=200), required=False, default=list
    )
    medical_notes = serializers.CharField(required=False, allow_blank=True)

    def validate_email(self, value):
        return _validate_email(value)

    def validate_date_of_birth(self, value):
        if value > timezone.localdate():
            raise serializers.ValidationError("Date of birth cannot be in the future.")
        return value


class PatientUpdateSerializer(serializers.Serializer):
    """
    Update contract for PUT and PATCH alike: every field is optional and
    only the fields below can change. Anything else in the body is ignored.
    """
    first_name = serializers.CharField(max_length=100, required=False)
    last_name = serializers.CharField(max_length=100, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address = AddressSerializer(required=False)
    emergency_contact = EmergencyContactSerializer(required=False)
    insurance = InsuranceSerializer(required=False)
    status = serializers.ChoiceField(choices=PatientStatus.choices, required=False)

    def validate_email(self, value):
        return _validate_email(value)


class PatientListQuerySerializer(PageQuerySerializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    status = serializers.ChoiceField(choices=PatientStatus.choices, required=False)


# -----------------------------
# Output
# -----------------------------
class DoctorSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    first_name = serializers.CharField(read_only=True)
    last_name = serializers.CharField(read_only=True)
    specialization = serializers.SerializerMethodField()

    def get_specialization(self, user) -> str:
        profile = getattr(user, "clinic_profile", None)
        return profile.specialization if profile else ""


class DiagnosisSerializer(serializers.ModelSerializer):
    class Meta:
        model = PatientDiagnosis
        fields = ["condition", "diagnosed_at", "diagnosed_by", "medical_record"]
        read_only_fields = fields


class AppointmentSummarySerializer(serializers.ModelSerializer):
    doctor = DoctorSummarySerializer(read_only=True, allow_null=True)

    class Meta:
        model = Appointment
        fields = ["id", "scheduled_at", "status", "reason", "doctor"]
        read_only_fields = fields


class MedicalHistoryListSerializer(serializers.Serializer):
    """
    Medical-history block as shown in search results: notes are never included.
    """
    blood_type = serializers.CharField(read_only=True)
    allergies = serializers.JSONField(read_only=True)
    chronic_conditions = serializers.JSONField(read_only=True)
    diagnoses = DiagnosisSerializer(many=True, read_only=True)


class MedicalHistorySerializer(MedicalHistoryListSerializer):
    notes = serializers.CharField(source="medical_notes", read_only=True)


PATIENT_FIELDS = [
    "id",
    "patient_id",
    "first_name",
    "last_name",
    "full_name",
    "date_of_birth",
    "gender",
    "email",
    "phone",
    "address",
    "emergency_contact",
    "insurance",
    "status",
    "medical_history",
    "assigned_doctor",
    "created_by",
    "updated_by",
    "created_at",
    "updated_at",
    "deleted_at",
]


class PatientSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    medical_history = MedicalHistorySerializer(source="*", read_only=True)

    class Meta:
        model = Patient
        fields = PATIENT_FIELDS
        read_only_fields = fields


class PatientListSerializer(PatientSerializer):
    medical_history = MedicalHistoryListSerializer(source="*", read_only=True)


class PatientDetailSerializer(PatientSerializer):
    assigned_doctor = DoctorSummarySerializer(read_only=True, allow_null=True)
    appointments = AppointmentSummarySerializer(many=True, read_only=True)

    class Meta(PatientSerializer.Meta):
        fields = PATIENT_FIELDS + ["appointments"]
        read_only_fields = fields
