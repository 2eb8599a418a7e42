"""Serializers bridging HTTP payloads and domain objects."""

from __future__ import annotations

from functools import lru_cache

from rest_framework import serializers

from doctrack.application.reports import ReportPeriod
from doctrack.domain.models.record import RecordStatus, TrackableRecord, to_camel
from doctrack.domain.models.record_types import RecordType


class RecordSerializer(serializers.Serializer):
    """Renders a record as its flat document plus its category."""

    def to_representation(self, instance: TrackableRecord):
        record_type: RecordType = self.context["record_types"][instance.record_type]
        payload = instance.as_dict()
        payload["recordType"] = record_type.key
        payload["category"] = record_type.label
        payload["wasEdited"] = instance.was_edited
        return payload


class RecordTypeSerializer(serializers.Serializer):
    def to_representation(self, instance: RecordType):
        return instance.as_dict()


class BaseRecordInputSerializer(serializers.Serializer):
    dateTimeIn = serializers.DateTimeField(source="date_time_in", required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def split(self) -> tuple[dict, dict]:
        """Separate envelope values from type-specific fields."""
        data = dict(self.validated_data)
        envelope = {
            "date_time_in": data.pop("date_time_in", None),
            "remarks": data.pop("remarks", None),
        }
        return envelope, data


@lru_cache(maxsize=None)
def record_input_serializer(record_type: RecordType) -> type[BaseRecordInputSerializer]:
    """Build the create/edit serializer for one record type.

    Every field is optional here; mandatory fields are enforced by the record
    type so create and partial edits share one validation path.
    """
    attrs: dict[str, serializers.Field] = {}
    for spec in record_type.field_specs:
        name = to_camel(spec.name)
        options: dict[str, object] = {
            "required": False,
            "allow_null": True,
            "label": spec.label,
        }
        # DRF refuses a source equal to the field name.
        if name != spec.name:
            options["source"] = spec.name
        if spec.numeric:
            field = serializers.FloatField(**options)
        else:
            field = serializers.CharField(allow_blank=True, **options)
        attrs[name] = field
    class_name = "".join(part.capitalize() for part in record_type.key.split("_"))
    return type(f"{class_name}InputSerializer", (BaseRecordInputSerializer,), attrs)


class RejectSerializer(serializers.Serializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class TimeOutSerializer(serializers.Serializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    dateTimeOut = serializers.DateTimeField(source="date_time_out", required=False)


class RecordListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(
        choices=[status.value for status in RecordStatus], required=False
    )


class DashboardQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(
        choices=[status.value for status in RecordStatus],
        default=RecordStatus.PENDING.value,
    )


class ReportQuerySerializer(serializers.Serializer):
    period = serializers.ChoiceField(
        choices=[period.value for period in ReportPeriod],
        default=ReportPeriod.MONTHLY.value,
    )
    category = serializers.CharField(required=False, default="all")

    def validate_category(self, value: str) -> str:
        record_types = self.context["record_types"]
        if value != "all" and value not in record_types:
            raise serializers.ValidationError("Select a known record type or 'all'.")
        return value
