import pytest

from doctrack.domain.errors import ValidationError
from doctrack.domain.models.record_types import RECORD_TYPES, build_catalog


@pytest.fixture
def catalog():
    return build_catalog()


def test_catalog_prefixes_are_unique(catalog):
    assert len(catalog) == len(RECORD_TYPES) == 11
    prefixes = [record_type.prefix for record_type in catalog.values()]
    assert len(set(prefixes)) == len(prefixes)


def test_default_remarks_follow_label(catalog):
    assert catalog["overtime"].default_remarks == "Request for Overtime record created"
    assert catalog["voucher"].edited_remarks == "Voucher record edited"
    assert catalog["processing"].default_remarks == "Record created"


def test_clean_normalizes_text_and_numbers(catalog):
    cleaned = catalog["purchase_request"].clean(
        {
            "full_name": "  Maria Santos ",
            "designation": "Clerk",
            "item_description": "Bond paper",
            "quantity": "10",
            "estimated_cost": 2500,
            "purpose": "Office use",
            "received_by": "",
        }
    )
    assert cleaned["full_name"] == "Maria Santos"
    assert cleaned["quantity"] == 10.0
    assert cleaned["estimated_cost"] == 2500.0
    assert "received_by" not in cleaned


def test_clean_reports_every_missing_field(catalog):
    with pytest.raises(ValidationError) as excinfo:
        catalog["letter"].clean({"full_name": "Ana"})
    assert str(excinfo.value) == (
        "Please fill in all required fields: Designation/Office, Particulars"
    )


def test_clean_rejects_unknown_fields(catalog):
    with pytest.raises(ValidationError, match="Unknown fields for Letter: colour"):
        catalog["letter"].clean(
            {"full_name": "Ana", "designation_office": "PGO", "particulars": "x", "colour": "red"}
        )


def test_clean_rejects_non_numeric_amount(catalog):
    with pytest.raises(ValidationError, match="Amount must be a number"):
        catalog["obligation_request"].clean(
            {
                "full_name": "Ana",
                "designation": "Clerk",
                "obligation_type": "Supplies",
                "amount": "a lot",
                "particulars": "x",
            }
        )


def test_build_catalog_enables_editing_rejected_records():
    catalog = build_catalog(["leave"])
    assert catalog["leave"].edit_when_rejected
    assert not catalog["letter"].edit_when_rejected
    assert catalog["processing"].edit_when_rejected


def test_build_catalog_rejects_unknown_keys():
    with pytest.raises(ValueError):
        build_catalog(["memo"])
