# clinic_core/patients/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action

from clinic_core.audit.services import origin_from_request
from clinic_core.common.api.pagination import paginated_response
from clinic_core.common.api.responses import success_response
from clinic_core.common.permissions import PatientPermission
from clinic_core.iam.actors import actor_from_request
from clinic_core.patients.api.serializers import (
    PatientCreateSerializer,
    PatientDetailSerializer,
    PatientListQuerySerializer,
    PatientListSerializer,
    PatientSerializer,
    PatientUpdateSerializer,
)
from clinic_core.patients.models import Patient
from clinic_core.patients.services import PatientService
from clinic_core.records.api.serializers import MedicalRecordCreateSerializer, MedicalRecordSerializer
from clinic_core.records.models import MedicalRecordType
from clinic_core.records.services import MedicalRecordService


class PatientViewSet(viewsets.ViewSet):
    """
    Patients and their medical records.
    """
    permission_classes = [PatientPermission]

    # lets drf-spectacular type the {pk} path parameter
    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    @extend_schema(
        tags=["Patients"],
        parameters=[PatientListQuerySerializer],
        responses={200: PatientListSerializer(many=True)},
    )
    def list(self, request):
        query = PatientListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        page = PatientService.search_patients(
            actor=actor_from_request(request),
            search=params.get("search"),
            status=params.get("status"),
            page=params["page"],
            limit=params["limit"],
        )
        return paginated_response(page, PatientListSerializer)

    @extend_schema(tags=["Patients"], responses={200: PatientDetailSerializer})
    def retrieve(self, request, pk=None):
        patient = PatientService.get_patient(
            actor=actor_from_request(request),
            patient_id=pk,
            origin=origin_from_request(request),
        )
        return success_response(PatientDetailSerializer(patient).data)

    @extend_schema(tags=["Patients"], request=PatientCreateSerializer, responses={201: PatientSerializer})
    def create(self, request):
        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.create_patient(
            actor=actor_from_request(request),
            data=ser.validated_data,
            origin=origin_from_request(request),
        )
        return success_response(
            PatientSerializer(patient).data,
            message="Patient created successfully",
            status_code=status.HTTP_201_CREATED,
        )

    def _update(self, request, pk):
        ser = PatientUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.update_patient(
            actor=actor_from_request(request),
            patient_id=pk,
            data=ser.validated_data,
            origin=origin_from_request(request),
        )
        return success_response(PatientDetailSerializer(patient).data, message="Patient updated successfully")

    @extend_schema(tags=["Patients"], request=PatientUpdateSerializer, responses={200: PatientDetailSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Patients"], request=PatientUpdateSerializer, responses={200: PatientDetailSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Patients"], responses={200: OpenApiTypes.OBJECT})
    def destroy(self, request, pk=None):
        PatientService.soft_delete_patient(
            actor=actor_from_request(request),
            patient_id=pk,
            origin=origin_from_request(request),
        )
        return success_response(message="Patient deactivated successfully")

    # -----------------------------
    # /patients/{id}/records/
    # -----------------------------
    @extend_schema(
        tags=["Medical records"],
        responses={200: MedicalRecordSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=MedicalRecordType.values,
                description="Filter by record type.",
            ),
            OpenApiParameter(
                name="start_date",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Inclusive lower bound (ISO date or datetime).",
            ),
            OpenApiParameter(
                name="end_date",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Inclusive upper bound (ISO date or datetime). A date covers the whole day.",
            ),
        ],
    )
    @action(detail=True, methods=["get"], url_path="records")
    def records(self, request, pk=None):
        records = MedicalRecordService.list_records(
            actor=actor_from_request(request),
            patient_id=pk,
            params=request.query_params,
            origin=origin_from_request(request),
        )
        return success_response(MedicalRecordSerializer(records, many=True).data)

    @extend_schema(
        tags=["Medical records"],
        request=MedicalRecordCreateSerializer,
        responses={201: MedicalRecordSerializer},
    )
    @records.mapping.post
    def add_record(self, request, pk=None):
        ser = MedicalRecordCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        record = MedicalRecordService.add_record(
            actor=actor_from_request(request),
            patient_id=pk,
            data=ser.validated_data,
            origin=origin_from_request(request),
        )
        return success_response(
            MedicalRecordSerializer(record).data,
            message="Medical record added successfully",
            status_code=status.HTTP_201_CREATED,
        )
