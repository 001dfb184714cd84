import uuid

import django.core.serializers.json
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("patients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MedicalRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("consultation", "Consultation"),
                            ("diagnosis", "Diagnosis"),
                            ("lab_result", "Lab result"),
                            ("prescription", "Prescription"),
                            ("procedure", "Procedure"),
                            ("vaccination", "Vaccination"),
                            ("imaging", "Imaging"),
                            ("other", "Other"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("diagnosis", models.TextField(blank=True, default="")),
                ("treatment", models.TextField(blank=True, default="")),
                (
                    "medications",
                    models.JSONField(blank=True, default=list, encoder=django.core.serializers.json.DjangoJSONEncoder),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "attachments",
                    models.JSONField(blank=True, default=list, encoder=django.core.serializers.json.DjangoJSONEncoder),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="created_medical_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="medical_records",
                        to="patients.patient",
                    ),
                ),
            ],
            options={
                "db_table": "records_medical_record",
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["patient", "date"], name="records_patient_date_idx"),
                    models.Index(fields=["patient", "type", "date"], name="records_patient_type_idx"),
                ],
            },
        ),
    ]
