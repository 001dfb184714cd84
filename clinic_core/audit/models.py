# clinic_core/audit/models.py
from django.conf import settings
from django.db import models

from clinic_core.common.models import AppendOnlyModel


class AuditAction(models.TextChoices):
    VIEW = "view", "View"
    CREATE = "create", "Create"
    UPDATE = "update", "Update"
    DELETE = "delete", "Delete"
    VIEW_RECORDS = "view_records", "View records"
    ADD_RECORD = "add_record", "Add record"


class AuditLogEntry(AppendOnlyModel):
    """
    Immutable patient-access record read by compliance tooling.
    Field names and action values are a published contract; do not rename.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="patient_audit_entries",
    )
    patient = models.ForeignKey(
        "patients.Patient",
        on_delete=models.PROTECT,
        related_name="audit_entries",
    )
    action = models.CharField(max_length=32, choices=AuditAction.choices, db_index=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    # request origin
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")

    class Meta:
        db_table = "audit_audit_log_entry"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["patient", "timestamp"], name="audit_patient_ts_idx"),
            models.Index(fields=["user", "timestamp"], name="audit_user_ts_idx"),
            models.Index(fields=["action", "timestamp"], name="audit_action_ts_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.timestamp} {self.action} (patient={self.patient_id}, user={self.user_id})"
