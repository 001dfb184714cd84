# clinic_core/iam/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token

    Tokens are issued elsewhere; this only verifies them.
    """

    def authenticate(self, request):
        # 1) Prefer Authorization header
        header = self.get_header(request)
        if header:
            return super().authenticate(request)

        # 2) Cookie access token
        cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "clinic_access")
        raw_token = request.COOKIES.get(cookie_name)
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        user = self.get_user(validated_token)
        return user, validated_token
