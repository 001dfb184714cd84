# clinic_core/iam/api/me.py

from __future__ import annotations

from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from clinic_core.common.api.responses import success_response
from clinic_core.iam.actors import user_role


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """
        Returns the caller's identity and the single role the authorization gate uses.
        """
        user = request.user
        profile = getattr(user, "clinic_profile", None)

        return success_response(
            {
                "id": user.id,
                "username": user.get_username(),
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
                "role": user_role(user),
                "specialization": getattr(profile, "specialization", "") if profile else "",
            }
        )
