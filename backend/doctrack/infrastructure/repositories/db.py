from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Mapping, Optional

from django.apps import apps
from django.db import DatabaseError

from doctrack.application.use_cases import RecordRepository
from doctrack.domain.errors import NotFoundError, RepositoryError
from doctrack.domain.models.record import TrackableRecord, to_camel

logger = logging.getLogger(__name__)


class DjangoRecordRepository(RecordRepository):
    """Django ORM backed repository scoped to one record type."""

    def __init__(self, record_type: str) -> None:
        self.record_type = record_type
        self.model = apps.get_model("records", "RecordDocument")

    def list(self) -> list[TrackableRecord]:
        try:
            rows = list(self._queryset().order_by("-created_at"))
        except DatabaseError as exc:
            raise self._failure("list", exc) from exc
        return [self._to_domain(row) for row in rows]

    def count(self) -> int:
        try:
            return self._queryset().count()
        except DatabaseError as exc:
            raise self._failure("count", exc) from exc

    def add(self, record: TrackableRecord) -> TrackableRecord:
        columns = self._columns(
            {
                "status": record.status,
                "remarks": record.remarks,
                "remarks_history": record.remarks_history,
                "fields": record.fields,
                "date_time_in": record.date_time_in,
                "date_time_out": record.date_time_out,
                "time_out_remarks": record.time_out_remarks,
                "updated_at": record.updated_at,
            }
        )
        try:
            row = self.model.objects.create(
                record_type=self.record_type,
                tracking_id=record.tracking_id,
                created_at=record.created_at,
                **columns,
            )
        except DatabaseError as exc:
            raise self._failure("add", exc) from exc
        logger.info("Stored %s record %s (%s)", self.record_type, row.id, row.tracking_id)
        return self._to_domain(row)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> None:
        key = _parse_id(record_id)
        if key is None:
            raise NotFoundError(record_id)
        if not changes:
            if not self.exists(record_id):
                raise NotFoundError(record_id)
            return
        try:
            matched = self._queryset().filter(id=key).update(**self._columns(changes))
        except DatabaseError as exc:
            raise self._failure("update", exc) from exc
        if not matched:
            raise NotFoundError(record_id)

    def exists(self, record_id: str) -> bool:
        key = _parse_id(record_id)
        if key is None:
            return False
        try:
            return self._queryset().filter(id=key).exists()
        except DatabaseError as exc:
            raise self._failure("exists", exc) from exc

    def get(self, record_id: str) -> TrackableRecord:
        key = _parse_id(record_id)
        if key is None:
            raise NotFoundError(record_id)
        try:
            row = self._queryset().get(id=key)
        except self.model.DoesNotExist as exc:
            raise NotFoundError(record_id) from exc
        except DatabaseError as exc:
            raise self._failure("get", exc) from exc
        return self._to_domain(row)

    # helpers -----------------------------------------------------------

    def _queryset(self):
        return self.model.objects.filter(record_type=self.record_type)

    def _failure(self, operation: str, exc: Exception) -> RepositoryError:
        logger.exception("Record store %s failed for %s", operation, self.record_type)
        return RepositoryError(f"Record store unavailable: {exc}")

    def _columns(self, changes: Mapping[str, Any]) -> Dict[str, Any]:
        columns: Dict[str, Any] = {}
        for name, value in changes.items():
            if name == "status":
                columns[name] = value.value
            elif name == "remarks_history":
                columns[name] = [entry.as_dict() for entry in value]
            elif name == "fields":
                columns[name] = {to_camel(key): item for key, item in value.items()}
            else:
                columns[name] = value
        return columns

    def _to_domain(self, row) -> TrackableRecord:
        document: Dict[str, Any] = dict(row.fields or {})
        document.update(
            {
                "id": str(row.id),
                "trackingId": row.tracking_id,
                "status": row.status,
                "remarks": row.remarks,
                "remarksHistory": row.remarks_history or [],
                "dateTimeIn": row.date_time_in,
                "dateTimeOut": row.date_time_out,
                "timeOutRemarks": row.time_out_remarks,
                "createdAt": row.created_at,
                "updatedAt": row.updated_at,
            }
        )
        return TrackableRecord.from_dict(document, record_type=self.record_type)


def _parse_id(record_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None
