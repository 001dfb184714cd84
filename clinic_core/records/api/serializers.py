# clinic_core/records/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.records.models import MedicalRecord, MedicalRecordType


class MedicationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    dosage = serializers.CharField(max_length=100, required=False, allow_blank=True)
    frequency = serializers.CharField(max_length=100, required=False, allow_blank=True)
    duration = serializers.CharField(max_length=100, required=False, allow_blank=True)


class AttachmentSerializer(serializers.Serializer):
    """
    Reference to a file stored elsewhere; no upload happens through this API.
    """
    name = serializers.CharField(max_length=255)
    url = serializers.URLField(max_length=2048)
    content_type = serializers.CharField(max_length=100, required=False, allow_blank=True)


class MedicalRecordCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=MedicalRecordType.choices)
    diagnosis = serializers.CharField(required=False, allow_blank=True, default="")
    treatment = serializers.CharField(required=False, allow_blank=True, default="")
    medications = MedicationSerializer(many=True, required=False, default=list)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    attachments = AttachmentSerializer(many=True, required=False, default=list)


class CreatorSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    first_name = serializers.CharField(read_only=True)
    last_name = serializers.CharField(read_only=True)


class MedicalRecordSerializer(serializers.ModelSerializer):
    created_by = CreatorSummarySerializer(read_only=True)

    class Meta:
        model = MedicalRecord
        fields = [
            "id",
            "patient",
            "type",
            "date",
            "diagnosis",
            "treatment",
            "medications",
            "notes",
            "attachments",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields
