# clinic_core/records/filters.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta

import django_filters
from django import forms
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django_filters.constants import EMPTY_VALUES

from clinic_core.records.models import MedicalRecord, MedicalRecordType


def _aware(value: datetime) -> datetime:
    if timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


class DateOrDateTimeField(forms.Field):
    """
    Accepts an ISO date ("2025-03-01") or an ISO datetime
    ("2025-03-01T08:30:00Z"). Returns a date or an aware datetime.
    """
    default_error_messages = {
        "invalid": "Enter a valid ISO date or date/time.",
    }

    def to_python(self, value):
        if value in self.empty_values:
            return None
        if isinstance(value, (date, datetime)):
            return value

        raw = str(value).strip()
        # parse_datetime also accepts a bare date (as midnight), so dates go first
        try:
            parsed_d = parse_date(raw)
        except ValueError:
            parsed_d = None
        if parsed_d is not None:
            return parsed_d

        try:
            parsed_dt = parse_datetime(raw)
        except ValueError:
            parsed_dt = None
        if parsed_dt is None:
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        return _aware(parsed_dt)


class DateOrDateTimeFilter(django_filters.Filter):
    """
    Inclusive bound on a datetime column.

    A bare date used as an upper bound covers that whole day.
    """
    field_class = DateOrDateTimeField

    def __init__(self, *args, upper: bool = False, **kwargs):
        self.upper = upper
        kwargs.setdefault("lookup_expr", "lte" if upper else "gte")
        super().__init__(*args, **kwargs)

    def filter(self, qs, value):
        if value in EMPTY_VALUES:
            return qs

        if isinstance(value, datetime):
            return qs.filter(**{f"{self.field_name}__{self.lookup_expr}": _aware(value)})

        if self.upper:
            next_day = _aware(datetime.combine(value + timedelta(days=1), time.min))
            return qs.filter(**{f"{self.field_name}__lt": next_day})

        day_start = _aware(datetime.combine(value, time.min))
        return qs.filter(**{f"{self.field_name}__gte": day_start})


class MedicalRecordFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=MedicalRecordType.choices)
    start_date = DateOrDateTimeFilter(field_name="date")
    end_date = DateOrDateTimeFilter(field_name="date", upper=True)

    class Meta:
        model = MedicalRecord
        fields = ["type"]
