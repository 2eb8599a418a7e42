"""Domain objects for tracked office records and their remarks history."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from doctrack.domain.errors import ValidationError


class RecordStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RecordStatus.PENDING


class HistoryStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    REJECTED = "Rejected"
    EDITED = "Edited"


_REMARKS_REQUIRED = {HistoryStatus.COMPLETED, HistoryStatus.REJECTED}


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    remarks: str
    status: HistoryStatus
    timestamp: datetime
    updated_by: str

    def __post_init__(self) -> None:
        try:
            status = HistoryStatus(self.status)
        except ValueError as exc:
            raise ValidationError(f"Unknown history status: {self.status!r}") from exc
        object.__setattr__(self, "status", status)
        if not isinstance(self.timestamp, datetime):
            raise ValidationError("History timestamp must be a datetime")
        if status in _REMARKS_REQUIRED and not (self.remarks or "").strip():
            raise ValidationError(f"{status.value} history entries require remarks")

    def as_dict(self) -> dict[str, object]:
        return {
            "remarks": self.remarks,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEntry":
        return cls(
            remarks=str(data.get("remarks") or ""),
            status=data.get("status", ""),
            timestamp=parse_timestamp(data.get("timestamp")),
            updated_by=str(data.get("updatedBy") or ""),
        )


@dataclass(slots=True, frozen=True)
class TrackableRecord:
    """Envelope shared by every record type.

    Instances are immutable; lifecycle transitions return a new record with the
    history extended, so earlier copies held by callers never change underneath
    them.
    """

    id: Optional[str]
    record_type: str
    tracking_id: str
    status: RecordStatus
    remarks: str
    remarks_history: Tuple[HistoryEntry, ...]
    date_time_in: datetime
    created_at: datetime
    updated_at: datetime
    fields: Dict[str, Any] = field(default_factory=dict)
    date_time_out: Optional[datetime] = None
    time_out_remarks: str = ""

    @property
    def last_entry(self) -> Optional[HistoryEntry]:
        return self.remarks_history[-1] if self.remarks_history else None

    @property
    def was_edited(self) -> bool:
        return any(entry.status is HistoryStatus.EDITED for entry in self.remarks_history)

    @property
    def completed_at(self) -> Optional[datetime]:
        entry = self._last_with(HistoryStatus.COMPLETED)
        if entry is not None:
            return entry.timestamp
        return self.date_time_out

    @property
    def rejected_at(self) -> Optional[datetime]:
        entry = self._last_with(HistoryStatus.REJECTED)
        if entry is not None:
            return entry.timestamp
        if self.status is RecordStatus.REJECTED:
            return self.updated_at
        return None

    def _last_with(self, status: HistoryStatus) -> Optional[HistoryEntry]:
        for entry in reversed(self.remarks_history):
            if entry.status is status:
                return entry
        return None

    def as_dict(self) -> dict[str, object]:
        """Flat document layout used by the store and the REST API."""
        payload: dict[str, object] = {
            "id": self.id,
            "trackingId": self.tracking_id,
            "status": self.status.value,
            "remarks": self.remarks,
            "remarksHistory": [entry.as_dict() for entry in self.remarks_history],
            "dateTimeIn": self.date_time_in.isoformat(),
            "dateTimeOut": self.date_time_out.isoformat() if self.date_time_out else None,
            "timeOutRemarks": self.time_out_remarks,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        for name, value in self.fields.items():
            payload[to_camel(name)] = value
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, record_type: str) -> "TrackableRecord":
        known = set(_ENVELOPE_KEYS)
        fields = {
            to_snake(key): value for key, value in data.items() if key not in known
        }
        raw_out = data.get("dateTimeOut")
        record_id = data.get("id")
        return cls(
            id=str(record_id) if record_id else None,
            record_type=record_type,
            tracking_id=str(data.get("trackingId") or ""),
            status=RecordStatus(data.get("status") or RecordStatus.PENDING.value),
            remarks=str(data.get("remarks") or ""),
            remarks_history=tuple(
                HistoryEntry.from_dict(entry) for entry in data.get("remarksHistory") or []
            ),
            date_time_in=parse_timestamp(data.get("dateTimeIn")),
            date_time_out=parse_timestamp(raw_out) if raw_out else None,
            time_out_remarks=str(data.get("timeOutRemarks") or ""),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            fields=fields,
        )


_ENVELOPE_KEYS = (
    "id",
    "trackingId",
    "status",
    "remarks",
    "remarksHistory",
    "dateTimeIn",
    "dateTimeOut",
    "timeOutRemarks",
    "createdAt",
    "updatedAt",
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        raise ValidationError("Timestamp is required")
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp: {value!r}") from exc
