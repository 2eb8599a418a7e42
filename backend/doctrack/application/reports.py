"""Read-side queries: dashboard search, period reports and monthly totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

from doctrack.domain.models.record import RecordStatus, TrackableRecord
from doctrack.domain.models.record_types import RecordType


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass(slots=True)
class ReportStats:
    total: int = 0
    pending: int = 0
    completed: int = 0
    rejected: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "completed": self.completed,
            "rejected": self.rejected,
        }


@dataclass(slots=True)
class Report:
    start: datetime
    end: datetime
    records: List[TrackableRecord] = field(default_factory=list)
    stats: ReportStats = field(default_factory=ReportStats)


def title_of(record: TrackableRecord, record_type: RecordType) -> str:
    return str(record.fields.get(record_type.title_field) or "")


def search_records(
    records: Iterable[TrackableRecord],
    term: str,
    catalog: Mapping[str, RecordType],
) -> List[TrackableRecord]:
    """Case-insensitive match on tracking ID, title and category label."""
    needle = term.strip().lower()
    if not needle:
        return list(records)
    matches: List[TrackableRecord] = []
    for record in records:
        record_type = catalog[record.record_type]
        haystack = (
            record.tracking_id,
            title_of(record, record_type),
            record_type.label,
        )
        if any(needle in value.lower() for value in haystack):
            matches.append(record)
    return matches


def filter_by_status(
    records: Iterable[TrackableRecord], status: Optional[RecordStatus]
) -> List[TrackableRecord]:
    if status is None:
        return list(records)
    return [record for record in records if record.status is status]


def period_range(period: ReportPeriod, now: datetime) -> Tuple[datetime, datetime]:
    """Inclusive bounds of the period containing ``now``.

    Weeks start on Sunday. Daily, weekly and monthly ranges end today; quarters
    and years run to their last day.
    """
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is ReportPeriod.DAILY:
        start = day_start
        end = day_start
    elif period is ReportPeriod.WEEKLY:
        start = day_start - timedelta(days=(now.weekday() + 1) % 7)
        end = day_start
    elif period is ReportPeriod.MONTHLY:
        start = day_start.replace(day=1)
        end = day_start
    elif period is ReportPeriod.QUARTERLY:
        first_month = (now.month - 1) // 3 * 3 + 1
        start = day_start.replace(month=first_month, day=1)
        end = _month_end(start.replace(month=first_month + 2))
    else:
        start = day_start.replace(month=1, day=1)
        end = day_start.replace(month=12, day=31)
    return start, end.replace(hour=23, minute=59, second=59, microsecond=999999)


def _month_end(month_start: datetime) -> datetime:
    following = (month_start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return following - timedelta(days=1)


def build_report(
    records: Iterable[TrackableRecord], start: datetime, end: datetime
) -> Report:
    report = Report(start=start, end=end)
    for record in records:
        if not start <= record.date_time_in <= end:
            continue
        report.records.append(record)
        report.stats.total += 1
        if record.status is RecordStatus.PENDING:
            report.stats.pending += 1
        elif record.status is RecordStatus.COMPLETED:
            report.stats.completed += 1
        else:
            report.stats.rejected += 1
    return report


def monthly_total(
    records: Iterable[TrackableRecord], record_type: RecordType, now: datetime
) -> float:
    """Sum the type's amount field over this month's non-rejected records."""
    if record_type.amount_field is None:
        raise ValueError(f"{record_type.label} records carry no amount")
    total = 0.0
    for record in records:
        logged = record.date_time_in
        if logged.tzinfo is not None and now.tzinfo is not None:
            logged = logged.astimezone(now.tzinfo)
        if (logged.year, logged.month) != (now.year, now.month):
            continue
        if record.status is RecordStatus.REJECTED:
            continue
        total += float(record.fields.get(record_type.amount_field) or 0)
    return total
