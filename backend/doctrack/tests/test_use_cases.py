from datetime import datetime, timedelta, timezone

import pytest

from doctrack.application.use_cases import (
    CreateRecord,
    EditRecord,
    RejectRecord,
    TimeOutRecord,
)
from doctrack.domain import lifecycle
from doctrack.domain.errors import (
    IllegalTransitionError,
    NotFoundError,
    RepositoryError,
    StaleRecordError,
    ValidationError,
)
from doctrack.domain.models.record import HistoryStatus, RecordStatus
from doctrack.domain.models.record_types import build_catalog
from doctrack.infrastructure.repositories.memory import InMemoryRecordRepository

CATALOG = build_catalog()
LEAVE = CATALOG["leave"]
NOW = datetime(2025, 3, 7, 9, 30, tzinfo=timezone.utc)
MANILA = timezone(timedelta(hours=8))
LEAVE_FIELDS = {
    "full_name": "Juan Dela Cruz",
    "designation": "Staff",
    "leave_type": "Sick Leave",
    "inclusive_date_start": "2025-03-10",
    "inclusive_date_end": "2025-03-11",
}


class RecordingRepository(InMemoryRecordRepository):
    def __init__(self, record_type: str) -> None:
        super().__init__(record_type)
        self.updates: list[str] = []

    def update(self, record_id, changes):
        self.updates.append(record_id)
        super().update(record_id, changes)

    def delete(self, record_id: str) -> None:
        self._store.pop(record_id, None)


class VanishingRepository(InMemoryRecordRepository):
    """Reports the record as present, then loses it before the write."""

    def exists(self, record_id: str) -> bool:
        return True

    def update(self, record_id, changes):
        raise NotFoundError(record_id)


class BrokenRepository(InMemoryRecordRepository):
    def list(self):
        raise OSError("connection refused")

    def count(self):
        raise OSError("connection refused")

    def update(self, record_id, changes):
        raise OSError("connection refused")


@pytest.fixture
def repository():
    return RecordingRepository("leave")


@pytest.fixture
def create(repository):
    return CreateRecord(repository=repository, record_type=LEAVE)


def test_create_record_persists_and_numbers(repository, create):
    for _ in range(4):
        create(LEAVE_FIELDS, actor="clerk", now=NOW)

    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)

    assert record.id is not None
    assert record.tracking_id == "(LV) 2025/03/07-005"
    assert repository.get(record.id) == record
    assert len(repository.list()) == repository.count() == 5


def test_create_record_numbers_by_local_date(repository):
    create = CreateRecord(repository=repository, record_type=LEAVE, tz=MANILA)
    late_evening_utc = datetime(2025, 3, 6, 20, 0, tzinfo=timezone.utc)

    record = create(LEAVE_FIELDS, actor="clerk", now=late_evening_utc)

    assert record.tracking_id == "(LV) 2025/03/07-001"


def test_create_letter_uses_spaced_separator():
    repository = InMemoryRecordRepository("letter")
    create = CreateRecord(repository=repository, record_type=CATALOG["letter"])
    record = create(
        {"full_name": "Ana", "designation_office": "PGO", "particulars": "Invitation"},
        actor="clerk",
        now=NOW,
    )
    assert record.tracking_id == "(L) 2025/03/07 - 001"


def test_create_record_validation_leaves_store_untouched(repository, create):
    with pytest.raises(ValidationError):
        create({"full_name": "Juan"}, actor="clerk", now=NOW)
    assert repository.list() == []


def test_edit_record_persists_changes(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    edit = EditRecord(repository=repository, record_type=LEAVE)

    updated = edit(record, {"purpose": "Check-up"}, actor="chief", now=NOW + timedelta(hours=1))

    stored = repository.get(record.id)
    assert stored == updated
    assert stored.remarks_history[-1].status is HistoryStatus.EDITED
    assert stored.fields["purpose"] == "Check-up"


def test_reject_twice_is_refused_without_writing(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    reject = RejectRecord(repository=repository, record_type=LEAVE)

    rejected = reject(record, "insufficient balance", actor="chief", now=NOW)
    assert repository.get(record.id).status is RecordStatus.REJECTED

    with pytest.raises(IllegalTransitionError):
        reject(rejected, "again", actor="chief", now=NOW)
    assert repository.updates == [record.id]
    assert len(repository.get(record.id).remarks_history) == 2


def test_reject_requires_remarks_without_writing(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    reject = RejectRecord(repository=repository, record_type=LEAVE)

    with pytest.raises(ValidationError):
        reject(record, "   ", actor="chief", now=NOW)
    assert repository.updates == []


def test_time_out_record_completes(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    time_out = TimeOutRecord(repository=repository, record_type=LEAVE)
    out = NOW + timedelta(hours=3)

    updated = time_out(record, "Released to HR", actor="clerk", date_time_out=out, now=out)

    stored = repository.get(record.id)
    assert stored == updated
    assert stored.status is RecordStatus.COMPLETED
    assert stored.date_time_out == out
    assert stored.time_out_remarks == "Released to HR"


def test_time_out_deleted_record_is_stale(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    repository.delete(record.id)
    time_out = TimeOutRecord(repository=repository, record_type=LEAVE)

    with pytest.raises(StaleRecordError) as excinfo:
        time_out(record, "Released", actor="clerk", now=NOW)

    assert str(excinfo.value) == (
        "Leave record not found. It may have been deleted or the data is out of sync."
    )
    assert repository.updates == []


def test_time_out_unsaved_record_is_stale(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    other_store = RecordingRepository("leave")
    time_out = TimeOutRecord(repository=other_store, record_type=LEAVE)

    with pytest.raises(StaleRecordError):
        time_out(record, "Released", actor="clerk", now=NOW)
    assert other_store.updates == []


def test_time_out_record_lost_during_write_is_stale():
    repository = VanishingRepository("leave")
    record = CreateRecord(repository=repository, record_type=LEAVE)(
        LEAVE_FIELDS, actor="clerk", now=NOW
    )
    time_out = TimeOutRecord(repository=repository, record_type=LEAVE)

    with pytest.raises(StaleRecordError):
        time_out(record, "Released", actor="clerk", now=NOW)


def test_time_out_validates_before_checking_store(repository, create):
    record = create(LEAVE_FIELDS, actor="clerk", now=NOW)
    repository.delete(record.id)
    time_out = TimeOutRecord(repository=repository, record_type=LEAVE)

    with pytest.raises(ValidationError):
        time_out(record, "", actor="clerk", now=NOW)


def test_repository_failures_are_wrapped():
    repository = BrokenRepository("leave")
    create = CreateRecord(repository=repository, record_type=LEAVE)

    with pytest.raises(RepositoryError) as excinfo:
        create(LEAVE_FIELDS, actor="clerk", now=NOW)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_failed_write_keeps_store_unchanged():
    repository = BrokenRepository("leave")
    record = repository.add(
        lifecycle.create(
            LEAVE, LEAVE_FIELDS, tracking_id="(LV) 2025/03/07-001", actor="clerk", now=NOW
        )
    )
    reject = RejectRecord(repository=repository, record_type=LEAVE)

    with pytest.raises(RepositoryError):
        reject(record, "no slots", actor="chief", now=NOW)
    assert repository.get(record.id).status is RecordStatus.PENDING
