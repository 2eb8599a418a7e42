from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from doctrack.application import reports
from doctrack.application.reports import ReportPeriod
from doctrack.domain import lifecycle
from doctrack.domain.models.record import RecordStatus
from doctrack.domain.models.record_types import build_catalog

CATALOG = build_catalog()
UTC = timezone.utc


def _purchase(cost, logged, tracking_id="(PR) 2025/03/05-001"):
    record = lifecycle.create(
        CATALOG["purchase_request"],
        {
            "full_name": "Maria Santos",
            "designation": "Clerk",
            "item_description": "Bond paper",
            "quantity": 5,
            "estimated_cost": cost,
            "purpose": "Office use",
        },
        tracking_id=tracking_id,
        actor="clerk",
        now=logged,
        date_time_in=logged,
    )
    return replace(record, id=tracking_id)


def _voucher(payee, logged):
    return lifecycle.create(
        CATALOG["voucher"],
        {
            "dv_no": "DV-1",
            "payee": payee,
            "particulars": "Chairs",
            "designation_office": "GSO",
            "amount": 100,
            "voucher_type": "Check",
            "funds": "General Fund",
        },
        tracking_id="(V) 2025/03/05-001",
        actor="clerk",
        now=logged,
    )


@pytest.mark.parametrize(
    ("period", "now", "start", "end"),
    [
        (ReportPeriod.DAILY, datetime(2025, 3, 5, 14, 0), datetime(2025, 3, 5), datetime(2025, 3, 5)),
        (ReportPeriod.WEEKLY, datetime(2025, 3, 5, 14, 0), datetime(2025, 3, 2), datetime(2025, 3, 5)),
        (ReportPeriod.WEEKLY, datetime(2025, 3, 2, 8, 0), datetime(2025, 3, 2), datetime(2025, 3, 2)),
        (ReportPeriod.MONTHLY, datetime(2024, 2, 10), datetime(2024, 2, 1), datetime(2024, 2, 10)),
        (ReportPeriod.QUARTERLY, datetime(2025, 5, 15), datetime(2025, 4, 1), datetime(2025, 6, 30)),
        (ReportPeriod.QUARTERLY, datetime(2025, 12, 3), datetime(2025, 10, 1), datetime(2025, 12, 31)),
        (ReportPeriod.YEARLY, datetime(2025, 7, 4), datetime(2025, 1, 1), datetime(2025, 12, 31)),
    ],
)
def test_period_range(period, now, start, end):
    assert reports.period_range(period, now) == (
        start,
        end.replace(hour=23, minute=59, second=59, microsecond=999999),
    )


def test_build_report_counts_records_in_range():
    inside = _purchase(100, datetime(2025, 3, 3, 9, tzinfo=UTC))
    rejected = lifecycle.reject(
        _purchase(50, datetime(2025, 3, 4, 9, tzinfo=UTC)), "duplicate", actor="chief",
        now=datetime(2025, 3, 4, 10, tzinfo=UTC),
    )
    completed = lifecycle.time_out(
        _purchase(75, datetime(2025, 3, 5, 9, tzinfo=UTC)), "served", actor="chief",
        now=datetime(2025, 3, 5, 10, tzinfo=UTC),
    )
    outside = _purchase(10, datetime(2025, 2, 28, 9, tzinfo=UTC))
    future = _purchase(20, datetime(2025, 3, 6, 9, tzinfo=UTC))

    start, end = reports.period_range(
        ReportPeriod.MONTHLY, datetime(2025, 3, 5, 12, tzinfo=UTC)
    )
    report = reports.build_report(
        [inside, rejected, completed, outside, future], start, end
    )

    assert report.records == [inside, rejected, completed]
    assert report.stats.as_dict() == {
        "total": 3,
        "pending": 1,
        "completed": 1,
        "rejected": 1,
    }


def test_monthly_total_skips_rejected_and_other_months():
    now = datetime(2025, 3, 20, 12, tzinfo=UTC)
    records = [
        _purchase(1500.5, datetime(2025, 3, 1, 1, tzinfo=UTC)),
        _purchase("499.5", datetime(2025, 3, 19, 1, tzinfo=UTC)),
        lifecycle.reject(
            _purchase(1000, datetime(2025, 3, 2, 1, tzinfo=UTC)), "over budget",
            actor="chief", now=now,
        ),
        _purchase(900, datetime(2025, 2, 27, 1, tzinfo=UTC)),
    ]

    assert reports.monthly_total(records, CATALOG["purchase_request"], now) == 2000.0


def test_monthly_total_uses_local_month():
    manila = timezone(timedelta(hours=8))
    now = datetime(2025, 4, 1, 10, tzinfo=manila)
    logged_march_31_utc = datetime(2025, 3, 31, 18, tzinfo=UTC)

    total = reports.monthly_total(
        [_purchase(300, logged_march_31_utc)], CATALOG["purchase_request"], now
    )

    assert total == 300.0


def test_monthly_total_requires_amount_field():
    with pytest.raises(ValueError):
        reports.monthly_total([], CATALOG["leave"], datetime(2025, 3, 1))


def test_search_matches_tracking_id_title_and_category():
    logged = datetime(2025, 3, 5, 9, tzinfo=UTC)
    purchase = _purchase(100, logged)
    voucher = _voucher("ACME Supplies", logged)
    records = [purchase, voucher]

    assert reports.search_records(records, "(pr)", CATALOG) == [purchase]
    assert reports.search_records(records, "acme", CATALOG) == [voucher]
    assert reports.search_records(records, "VOUCHER", CATALOG) == [voucher]
    assert reports.search_records(records, "  ", CATALOG) == records
    assert reports.search_records(records, "nothing", CATALOG) == []


def test_filter_by_status():
    logged = datetime(2025, 3, 5, 9, tzinfo=UTC)
    pending = _purchase(100, logged)
    rejected = lifecycle.reject(pending, "no", actor="chief", now=logged)

    assert reports.filter_by_status([pending, rejected], RecordStatus.REJECTED) == [rejected]
    assert reports.filter_by_status([pending, rejected], None) == [pending, rejected]
