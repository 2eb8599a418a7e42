"""REST API views for DocTrack."""

from __future__ import annotations

import logging
from contextlib import contextmanager

from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import APIException, NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from doctrack.application import reports
from doctrack.application.use_cases import (
    CreateRecord,
    EditRecord,
    RejectRecord,
    TimeOutRecord,
)
from doctrack.bootstrap import container
from doctrack.domain.errors import (
    IllegalTransitionError,
    NotFoundError,
    RepositoryError,
    StaleRecordError,
    ValidationError,
)
from doctrack.domain.models.record import RecordStatus
from doctrack.interfaces.rest import serializers

logger = logging.getLogger(__name__)


class RecordValidationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid record data."
    default_code = "invalid"


class TransitionConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record's status does not allow this action."
    default_code = "illegal_transition"


class StaleRecord(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record is out of sync; refresh and try again."
    default_code = "stale_record"


class RecordStoreUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Record store unavailable."
    default_code = "store_unavailable"


@contextmanager
def translate_errors():
    """Map lifecycle errors onto HTTP responses."""
    try:
        yield
    except ValidationError as exc:
        raise RecordValidationFailed(str(exc)) from exc
    except IllegalTransitionError as exc:
        raise TransitionConflict(str(exc)) from exc
    except StaleRecordError as exc:
        raise StaleRecord(str(exc)) from exc
    except NotFoundError as exc:
        raise NotFound(str(exc)) from exc
    except RepositoryError as exc:
        logger.error("Record store failure: %s", exc)
        raise RecordStoreUnavailable(str(exc)) from exc


def _actor(request) -> str:
    user = request.user
    if user is not None and user.is_authenticated:
        name = user.get_full_name().strip() or user.get_username()
        if name:
            return name
    return container.default_actor()


def _serializer_context(request) -> dict[str, object]:
    return {"request": request, "record_types": container.record_types}


class RecordTypeListView(APIView):
    """Catalog of record types with their field definitions."""

    def get(self, request):
        serializer = serializers.RecordTypeSerializer(
            list(container.record_types.values()), many=True
        )
        return Response(serializer.data)


class RecordViewSet(viewsets.GenericViewSet):
    serializer_class = serializers.RecordSerializer
    lookup_field = "id"

    def get_serializer_context(self):
        return _serializer_context(self.request)

    def list(self, request, record_type=None):
        query = serializers.RecordListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        kind = self._record_type()
        with translate_errors():
            items = container.resolve_repository(kind.key).list()
        raw_status = query.validated_data.get("status")
        items = reports.filter_by_status(
            items, RecordStatus(raw_status) if raw_status else None
        )
        items = reports.search_records(
            items, query.validated_data["q"], container.record_types
        )
        serializer = self.get_serializer(items, many=True)
        return Response(serializer.data)

    def create(self, request, record_type=None):
        kind = self._record_type()
        payload = serializers.record_input_serializer(kind)(data=request.data)
        payload.is_valid(raise_exception=True)
        envelope, fields = payload.split()
        use_case = CreateRecord(
            repository=container.resolve_repository(kind.key),
            record_type=kind,
            tz=timezone.get_current_timezone(),
        )
        with translate_errors():
            record = use_case(fields, actor=_actor(request), **envelope)
        logger.info("Created %s record %s", kind.key, record.tracking_id)
        serializer = self.get_serializer(record)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, record_type=None, id=None):
        record = self.get_object()
        return Response(self.get_serializer(record).data)

    def partial_update(self, request, record_type=None, id=None):
        kind = self._record_type()
        record = self.get_object()
        payload = serializers.record_input_serializer(kind)(data=request.data)
        payload.is_valid(raise_exception=True)
        envelope, fields = payload.split()
        use_case = EditRecord(
            repository=container.resolve_repository(kind.key), record_type=kind
        )
        with translate_errors():
            updated = use_case(record, fields, actor=_actor(request), **envelope)
        logger.info("Edited %s record %s", kind.key, updated.tracking_id)
        return Response(self.get_serializer(updated).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, record_type=None, id=None):
        kind = self._record_type()
        record = self.get_object()
        payload = serializers.RejectSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        use_case = RejectRecord(
            repository=container.resolve_repository(kind.key), record_type=kind
        )
        with translate_errors():
            updated = use_case(
                record, payload.validated_data["remarks"], actor=_actor(request)
            )
        logger.info("Rejected %s record %s", kind.key, updated.tracking_id)
        return Response(self.get_serializer(updated).data)

    @action(detail=True, methods=["post"], url_path="time-out")
    def time_out(self, request, record_type=None, id=None):
        kind = self._record_type()
        use_case = TimeOutRecord(
            repository=container.resolve_repository(kind.key), record_type=kind
        )
        # A record gone from the store is reported as stale, not missing.
        try:
            record = self.get_object()
        except NotFound as exc:
            raise StaleRecord(str(use_case.stale_error())) from exc
        payload = serializers.TimeOutSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        with translate_errors():
            updated = use_case(
                record,
                payload.validated_data["remarks"],
                actor=_actor(request),
                date_time_out=payload.validated_data.get("date_time_out"),
            )
        logger.info("Timed out %s record %s", kind.key, updated.tracking_id)
        return Response(self.get_serializer(updated).data)

    @action(detail=False, methods=["get"], url_path="monthly-total")
    def monthly_total(self, request, record_type=None):
        kind = self._record_type()
        if kind.amount_field is None:
            raise NotFound(f"{kind.label} records carry no amount")
        now = timezone.localtime()
        with translate_errors():
            items = container.resolve_repository(kind.key).list()
        total = reports.monthly_total(items, kind, now)
        return Response(
            {
                "record_type": kind.key,
                "month": now.strftime("%B %Y"),
                "total": total,
            }
        )

    def get_object(self):
        kind = self._record_type()
        record_id = str(self.kwargs[self.lookup_field])
        with translate_errors():
            return container.resolve_repository(kind.key).get(record_id)

    def _record_type(self):
        key = self.kwargs.get("record_type", "")
        try:
            return container.resolve_record_type(key)
        except KeyError as exc:
            raise NotFound(f"Unknown record type '{key}'") from exc


class DashboardView(APIView):
    """Records of every type for one status tab, optionally searched."""

    def get(self, request):
        query = serializers.DashboardQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        selected = RecordStatus(query.validated_data["status"])
        everything = []
        with translate_errors():
            for key in container.record_types:
                everything.extend(container.resolve_repository(key).list())
        counts = {
            tab.value: len(reports.filter_by_status(everything, tab)) for tab in RecordStatus
        }
        items = reports.search_records(
            reports.filter_by_status(everything, selected),
            query.validated_data["q"],
            container.record_types,
        )
        items.sort(key=lambda record: record.created_at, reverse=True)
        serializer = serializers.RecordSerializer(
            items, many=True, context=_serializer_context(request)
        )
        return Response(
            {"status": selected.value, "counts": counts, "records": serializer.data}
        )


class ReportView(APIView):
    """Period report with per-status counts, across all types or one category."""

    def get(self, request):
        query = serializers.ReportQuerySerializer(
            data=request.query_params, context=_serializer_context(request)
        )
        query.is_valid(raise_exception=True)
        period = reports.ReportPeriod(query.validated_data["period"])
        category = query.validated_data["category"]
        keys = list(container.record_types) if category == "all" else [category]
        start, end = reports.period_range(period, timezone.localtime())
        collected = []
        with translate_errors():
            for key in keys:
                collected.extend(container.resolve_repository(key).list())
        report = reports.build_report(collected, start, end)
        serializer = serializers.RecordSerializer(
            report.records, many=True, context=_serializer_context(request)
        )
        return Response(
            {
                "period": period.value,
                "category": category,
                "start": report.start.isoformat(),
                "end": report.end.isoformat(),
                "stats": report.stats.as_dict(),
                "records": serializer.data,
            }
        )
