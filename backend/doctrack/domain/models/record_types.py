"""Catalog of the record types routed through the office."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from doctrack.domain.errors import ValidationError


@dataclass(slots=True, frozen=True)
class FieldSpec:
    name: str
    label: str
    required: bool = False
    numeric: bool = False


@dataclass(slots=True, frozen=True)
class RecordType:
    key: str
    label: str
    prefix: str
    field_specs: Tuple[FieldSpec, ...]
    title_field: str = "full_name"
    amount_field: Optional[str] = None
    separator: str = "-"
    default_remarks: str = ""
    edit_when_rejected: bool = False
    _by_name: Dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_by_name", {spec.name: spec for spec in self.field_specs}
        )
        if not self.default_remarks:
            object.__setattr__(self, "default_remarks", f"{self.label} record created")

    @property
    def edited_remarks(self) -> str:
        return f"{self.label} record edited"

    @property
    def required_fields(self) -> List[str]:
        return [spec.name for spec in self.field_specs if spec.required]

    def clean(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate type-specific values and return them normalized.

        Unknown names are rejected, every blank mandatory field is reported at
        once, text is stripped and numeric fields are coerced to ``float``.
        """
        unknown = sorted(name for name in values if name not in self._by_name)
        if unknown:
            raise ValidationError(
                f"Unknown fields for {self.label}: {', '.join(unknown)}"
            )
        cleaned: Dict[str, Any] = {}
        for name, raw in values.items():
            spec = self._by_name[name]
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            if spec.numeric:
                cleaned[name] = _coerce_number(spec, raw)
            elif isinstance(raw, str):
                cleaned[name] = raw.strip()
            else:
                cleaned[name] = raw
        missing = [
            spec.label for spec in self.field_specs if spec.required and spec.name not in cleaned
        ]
        if missing:
            raise ValidationError(
                f"Please fill in all required fields: {', '.join(missing)}"
            )
        return cleaned

    def as_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "label": self.label,
            "prefix": self.prefix,
            "fields": [
                {
                    "name": spec.name,
                    "label": spec.label,
                    "required": spec.required,
                    "numeric": spec.numeric,
                }
                for spec in self.field_specs
            ],
            "amount_field": self.amount_field,
            "edit_when_rejected": self.edit_when_rejected,
        }


def _coerce_number(spec: FieldSpec, raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValidationError(f"{spec.label} must be a number")
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{spec.label} must be a number") from exc


def _text(name: str, label: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name=name, label=label, required=required)


def _number(name: str, label: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name=name, label=label, required=required, numeric=True)


_INCLUSIVE_PERIOD = (
    _text("inclusive_date_start", "Inclusive date start", True),
    _text("inclusive_date_end", "Inclusive date end", True),
    _text("inclusive_time_start", "Inclusive time start"),
    _text("inclusive_time_end", "Inclusive time end"),
)

RECORD_TYPES: Tuple[RecordType, ...] = (
    RecordType(
        key="leave",
        label="Leave",
        prefix="LV",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("designation", "Designation", True),
            _text("leave_type", "Leave type", True),
            _text("inclusive_date_start", "Inclusive date start", True),
            _text("inclusive_date_end", "Inclusive date end", True),
            _text("purpose", "Purpose"),
        ),
    ),
    RecordType(
        key="letter",
        label="Letter",
        prefix="L",
        separator=" - ",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("designation_office", "Designation/Office", True),
            _text("particulars", "Particulars", True),
        ),
    ),
    RecordType(
        key="locator",
        label="Locator",
        prefix="LS",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("designation", "Designation", True),
            *_INCLUSIVE_PERIOD,
            _text("purpose", "Purpose"),
            _text("place_of_assignment", "Place of assignment", True),
        ),
    ),
    RecordType(
        key="obligation_request",
        label="Obligation Request",
        prefix="OR",
        amount_field="amount",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("designation", "Designation", True),
            _text("obligation_type", "Obligation type", True),
            _number("amount", "Amount", True),
            _text("particulars", "Particulars", True),
        ),
    ),
    RecordType(
        key="purchase_request",
        label="Purchase Request",
        prefix="PR",
        amount_field="estimated_cost",
        field_specs=(
            _text("received_by", "Received by"),
            _text("full_name", "Full name", True),
            _text("designation", "Designation", True),
            _text("item_description", "Item description", True),
            _number("quantity", "Quantity", True),
            _number("estimated_cost", "Estimated cost", True),
            _text("purpose", "Purpose", True),
        ),
    ),
    RecordType(
        key="overtime",
        label="Request for Overtime",
        prefix="OT",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("designation", "Designation", True),
            *_INCLUSIVE_PERIOD,
            _text("purpose", "Purpose", True),
            _text("place_of_assignment", "Place of assignment", True),
        ),
    ),
    RecordType(
        key="travel_order",
        label="Travel Order",
        prefix="TO",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("designation", "Designation", True),
            *_INCLUSIVE_PERIOD,
            _text("purpose", "Purpose"),
            _text("place_of_assignment", "Place of assignment", True),
        ),
    ),
    RecordType(
        key="voucher",
        label="Voucher",
        prefix="V",
        title_field="payee",
        amount_field="amount",
        field_specs=(
            _text("dv_no", "DV No.", True),
            _text("payee", "Payee", True),
            _text("particulars", "Particulars", True),
            _text("designation_office", "Designation/Office", True),
            _number("amount", "Amount", True),
            _text("voucher_type", "Voucher type", True),
            _text("funds", "Funds", True),
        ),
    ),
    RecordType(
        key="admin_to_pgo",
        label="Admin to PGO",
        prefix="ATP",
        field_specs=(
            _text("full_name", "Full name", True),
            _text("office_address", "Office address", True),
            _text("particulars", "Particulars", True),
        ),
    ),
    RecordType(
        key="others",
        label="Others",
        prefix="O",
        field_specs=(
            _text("received_by", "Received by"),
            _text("full_name", "Full name", True),
            _text("designation_office", "Designation/Office", True),
            *_INCLUSIVE_PERIOD,
            _text("purpose", "Purpose"),
            _number("amount", "Amount"),
            _text("link_attachments", "Link attachments"),
        ),
    ),
    RecordType(
        key="processing",
        label="Processing",
        prefix="P",
        default_remarks="Record created",
        edit_when_rejected=True,
        field_specs=(
            _text("received_by", "Received by"),
            _text("full_name", "Full name", True),
            _text("designation_office", "Designation/Office", True),
            _text("purpose", "Purpose"),
            _number("amount", "Amount"),
            _text("link_attachments", "Link attachments"),
        ),
    ),
)


def build_catalog(edit_rejected: Iterable[str] = ()) -> Dict[str, RecordType]:
    """Index the record types by key, enabling edit-while-rejected where configured."""
    enabled = set(edit_rejected)
    unknown = enabled - {record_type.key for record_type in RECORD_TYPES}
    if unknown:
        raise ValueError(f"Unknown record types: {', '.join(sorted(unknown))}")
    catalog: Dict[str, RecordType] = {}
    for record_type in RECORD_TYPES:
        if record_type.key in enabled and not record_type.edit_when_rejected:
            record_type = replace(record_type, edit_when_rejected=True)
        catalog[record_type.key] = record_type
    return catalog
