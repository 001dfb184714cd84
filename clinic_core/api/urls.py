# clinic_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from clinic_core.iam.api.me import MeView
from clinic_core.patients.api.views import PatientViewSet

router = DefaultRouter()

# /patients/, /patients/{id}/, /patients/{id}/records/
router.register(r"patients", PatientViewSet, basename="patients")

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("", include(router.urls)),
]
