"""Application-layer use cases driving the record lifecycle through a repository."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping, Optional, Protocol, TypeVar

from doctrack.domain import lifecycle
from doctrack.domain.errors import (
    NotFoundError,
    RecordLifecycleError,
    RepositoryError,
    StaleRecordError,
)
from doctrack.domain.models.record import TrackableRecord
from doctrack.domain.models.record_types import RecordType
from doctrack.domain.tracking import generate_tracking_id

T = TypeVar("T")


class RecordRepository(Protocol):
    """Persistence boundary for the records of a single type."""

    def list(self) -> list[TrackableRecord]:  # pragma: no cover
        ...

    def count(self) -> int:  # pragma: no cover
        ...

    def add(self, record: TrackableRecord) -> TrackableRecord:  # pragma: no cover
        ...

    def update(self, record_id: str, changes: Mapping[str, Any]) -> None:  # pragma: no cover
        ...

    def exists(self, record_id: str) -> bool:  # pragma: no cover
        ...

    def get(self, record_id: str) -> TrackableRecord:  # pragma: no cover
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _call(operation: Callable[..., T], *args: Any) -> T:
    try:
        return operation(*args)
    except RecordLifecycleError:
        raise
    except Exception as exc:
        raise RepositoryError(str(exc) or exc.__class__.__name__) from exc


@dataclass
class CreateRecord:
    repository: RecordRepository
    record_type: RecordType
    tz: Optional[tzinfo] = None

    def __call__(
        self,
        fields: Mapping[str, Any],
        *,
        actor: str,
        remarks: Optional[str] = None,
        date_time_in: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> TrackableRecord:
        now = now or _utcnow()
        existing_count = _call(self.repository.count)
        local_now = now.astimezone(self.tz) if self.tz is not None else now
        tracking_id = generate_tracking_id(
            self.record_type.prefix,
            existing_count,
            local_now,
            separator=self.record_type.separator,
        )
        record = lifecycle.create(
            self.record_type,
            fields,
            tracking_id=tracking_id,
            actor=actor,
            now=now,
            remarks=remarks,
            date_time_in=date_time_in,
        )
        return _call(self.repository.add, record)


@dataclass
class EditRecord:
    repository: RecordRepository
    record_type: RecordType

    def __call__(
        self,
        record: TrackableRecord,
        fields: Mapping[str, Any],
        *,
        actor: str,
        remarks: Optional[str] = None,
        date_time_in: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> TrackableRecord:
        updated = lifecycle.edit(
            record,
            self.record_type,
            fields,
            actor=actor,
            now=now or _utcnow(),
            remarks=remarks,
            date_time_in=date_time_in,
        )
        _persist(self.repository, record, updated)
        return updated


@dataclass
class RejectRecord:
    repository: RecordRepository
    record_type: RecordType

    def __call__(
        self,
        record: TrackableRecord,
        remarks: Optional[str],
        *,
        actor: str,
        now: Optional[datetime] = None,
    ) -> TrackableRecord:
        updated = lifecycle.reject(record, remarks, actor=actor, now=now or _utcnow())
        _persist(self.repository, record, updated)
        return updated


@dataclass
class TimeOutRecord:
    """Mark a record as released, re-checking the store before writing.

    The caller's copy may come from a periodically refreshed list, so the
    record's existence is confirmed right before the update. The check and the
    write are not atomic.
    """

    repository: RecordRepository
    record_type: RecordType

    def __call__(
        self,
        record: TrackableRecord,
        remarks: Optional[str],
        *,
        actor: str,
        date_time_out: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> TrackableRecord:
        updated = lifecycle.time_out(
            record,
            remarks,
            actor=actor,
            now=now or _utcnow(),
            date_time_out=date_time_out,
        )
        if record.id is None or not _call(self.repository.exists, record.id):
            raise self.stale_error()
        try:
            _persist(self.repository, record, updated)
        except NotFoundError as exc:
            raise self.stale_error() from exc
        return updated

    def stale_error(self) -> StaleRecordError:
        return StaleRecordError(
            f"{self.record_type.label} record not found. "
            "It may have been deleted or the data is out of sync."
        )


def _persist(
    repository: RecordRepository, before: TrackableRecord, after: TrackableRecord
) -> None:
    if before.id is None:
        raise NotFoundError("<unsaved>")
    changes = lifecycle.record_changes(before, after)
    _call(repository.update, before.id, changes)
