# clinic_core/iam/models.py
import uuid
from django.conf import settings
from django.db import models

from clinic_core.common.models import TimeStampedModel


class Role(models.TextChoices):
    """
    Closed role set. Every clinical user holds exactly one of these.
    """
    ADMIN = "admin", "Admin"
    DOCTOR = "doctor", "Doctor"
    NURSE = "nurse", "Nurse"


class UserProfile(TimeStampedModel):
    """
    Clinic identity wrapper anchored to Django's AUTH_USER_MODEL.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="clinic_profile")
    role = models.CharField(max_length=16, choices=Role.choices, db_index=True)

    # shown next to the doctor's name on patient records
    specialization = models.CharField(max_length=128, blank=True, default="")

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role", "is_active"], name="iam_profile_role_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.username} ({self.role})"
