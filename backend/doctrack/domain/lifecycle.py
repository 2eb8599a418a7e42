"""Status transitions shared by every tracked record type.

Each transition is a pure function: it validates its preconditions, appends one
history entry and returns a new record. Failures raise before anything is built,
so the caller's record is left as it was.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from doctrack.domain.errors import IllegalTransitionError, ValidationError
from doctrack.domain.models.record import (
    HistoryEntry,
    HistoryStatus,
    RecordStatus,
    TrackableRecord,
)
from doctrack.domain.models.record_types import RecordType

_ALLOWED_TRANSITIONS: Dict[RecordStatus, List[RecordStatus]] = {
    RecordStatus.PENDING: [
        RecordStatus.PENDING,
        RecordStatus.COMPLETED,
        RecordStatus.REJECTED,
    ],
    RecordStatus.COMPLETED: [],
    RecordStatus.REJECTED: [],
}

MUTABLE_ATTRIBUTES = (
    "status",
    "remarks",
    "remarks_history",
    "fields",
    "date_time_in",
    "date_time_out",
    "time_out_remarks",
    "updated_at",
)


def create(
    record_type: RecordType,
    fields: Mapping[str, Any],
    *,
    tracking_id: str,
    actor: str,
    now: datetime,
    remarks: Optional[str] = None,
    date_time_in: Optional[datetime] = None,
) -> TrackableRecord:
    values = record_type.clean(fields)
    text = _optional_remarks(remarks) or record_type.default_remarks
    entry = HistoryEntry(
        remarks=text, status=HistoryStatus.PENDING, timestamp=now, updated_by=actor
    )
    return TrackableRecord(
        id=None,
        record_type=record_type.key,
        tracking_id=tracking_id,
        status=RecordStatus.PENDING,
        remarks=text,
        remarks_history=(entry,),
        date_time_in=date_time_in or now,
        created_at=now,
        updated_at=now,
        fields=values,
    )


def edit(
    record: TrackableRecord,
    record_type: RecordType,
    fields: Mapping[str, Any],
    *,
    actor: str,
    now: datetime,
    remarks: Optional[str] = None,
    date_time_in: Optional[datetime] = None,
) -> TrackableRecord:
    if record.status is RecordStatus.COMPLETED:
        raise IllegalTransitionError("Cannot edit completed records")
    if record.status is RecordStatus.REJECTED and not record_type.edit_when_rejected:
        raise IllegalTransitionError("Cannot edit rejected records")
    values = record_type.clean({**record.fields, **fields})
    text = _optional_remarks(remarks) or record_type.edited_remarks
    entry = HistoryEntry(
        remarks=text, status=HistoryStatus.EDITED, timestamp=now, updated_by=actor
    )
    return replace(
        record,
        fields=values,
        date_time_in=date_time_in or record.date_time_in,
        remarks=text,
        remarks_history=record.remarks_history + (entry,),
        updated_at=now,
    )


def reject(
    record: TrackableRecord, remarks: Optional[str], *, actor: str, now: datetime
) -> TrackableRecord:
    _ensure_transition(
        record,
        RecordStatus.REJECTED,
        completed="Cannot reject completed records",
        rejected="Record already rejected",
    )
    text = _required_remarks(remarks, "Rejection remarks are required")
    entry = HistoryEntry(
        remarks=text, status=HistoryStatus.REJECTED, timestamp=now, updated_by=actor
    )
    return replace(
        record,
        status=RecordStatus.REJECTED,
        remarks=text,
        remarks_history=record.remarks_history + (entry,),
        updated_at=now,
    )


def time_out(
    record: TrackableRecord,
    remarks: Optional[str],
    *,
    actor: str,
    now: datetime,
    date_time_out: Optional[datetime] = None,
) -> TrackableRecord:
    _ensure_transition(
        record,
        RecordStatus.COMPLETED,
        completed="Cannot time out completed records",
        rejected="Cannot time out rejected records",
    )
    text = _required_remarks(remarks, "Time out remarks are required")
    entry = HistoryEntry(
        remarks=text, status=HistoryStatus.COMPLETED, timestamp=now, updated_by=actor
    )
    return replace(
        record,
        status=RecordStatus.COMPLETED,
        date_time_out=date_time_out or now,
        remarks=text,
        time_out_remarks=text,
        remarks_history=record.remarks_history + (entry,),
        updated_at=now,
    )


def replay_status(history: Iterable[HistoryEntry]) -> RecordStatus:
    """Recompute a record's status from its history."""
    status: Optional[RecordStatus] = None
    for entry in history:
        if entry.status is not HistoryStatus.EDITED:
            status = RecordStatus(entry.status.value)
    if status is None:
        raise ValueError("History holds no status entries")
    return status


def record_changes(before: TrackableRecord, after: TrackableRecord) -> Dict[str, Any]:
    """Attributes that differ between two versions of the same record."""
    if before.id != after.id:
        raise ValueError("Cannot diff two different records")
    return {
        name: getattr(after, name)
        for name in MUTABLE_ATTRIBUTES
        if getattr(before, name) != getattr(after, name)
    }


def _ensure_transition(
    record: TrackableRecord, target: RecordStatus, *, completed: str, rejected: str
) -> None:
    if target in _ALLOWED_TRANSITIONS[record.status]:
        return
    if record.status is RecordStatus.COMPLETED:
        raise IllegalTransitionError(completed)
    raise IllegalTransitionError(rejected)


def _optional_remarks(remarks: Optional[str]) -> str:
    return (remarks or "").strip()


def _required_remarks(remarks: Optional[str], message: str) -> str:
    text = _optional_remarks(remarks)
    if not text:
        raise ValidationError(message)
    return text
