# clinic_core/iam/actors.py
from __future__ import annotations

from dataclasses import dataclass

from django.core.exceptions import ObjectDoesNotExist

from clinic_core.iam.models import Role


@dataclass(frozen=True)
class Actor:
    """
    Authenticated caller as seen by the services: who they are and their single role.
    role is None when the user has no active clinic profile.
    """
    user_id: int
    role: str | None

    @property
    def is_doctor(self) -> bool:
        return self.role == Role.DOCTOR.value


def user_role(user) -> str | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None

    try:
        profile = user.clinic_profile
    except ObjectDoesNotExist:
        return None

    if not profile.is_active:
        return None
    return str(profile.role)


def actor_from_user(user) -> Actor:
    return Actor(user_id=user.id, role=user_role(user))


def actor_from_request(request) -> Actor:
    return actor_from_user(request.user)
