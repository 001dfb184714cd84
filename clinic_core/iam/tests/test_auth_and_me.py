# clinic_core/iam/tests/test_auth_and_me.py
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from clinic_core.iam.actors import actor_from_user, user_role
from clinic_core.iam.models import UserProfile

pytestmark = pytest.mark.django_db


def _access_token(user):
    return str(RefreshToken.for_user(user).access_token)


def test_me_requires_auth(anon_client):
    res = anon_client.get("/api/v1/me/")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_bearer_token_authenticates(doctor_user):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {_access_token(doctor_user)}")

    res = c.get("/api/v1/me/")
    assert res.status_code == 200, res.data
    data = res.json()["data"]
    assert data["id"] == doctor_user.id
    assert data["role"] == "doctor"
    assert data["specialization"] == "Cardiology"


def test_cookie_token_authenticates(nurse_user, settings):
    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = _access_token(nurse_user)

    res = c.get("/api/v1/patients/")
    assert res.status_code == 200, res.data


def test_invalid_token_is_rejected():
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")

    res = c.get("/api/v1/patients/")
    assert res.status_code == 401


def test_inactive_profile_has_no_role(nurse_user):
    UserProfile.objects.filter(user=nurse_user).update(is_active=False)
    nurse_user.refresh_from_db()

    assert user_role(nurse_user) is None
    assert actor_from_user(nurse_user).role is None


def test_user_without_profile_has_no_role(roleless_user):
    assert user_role(roleless_user) is None
