"""Human-readable tracking identifiers."""

from __future__ import annotations

from datetime import date


def generate_tracking_id(
    prefix: str, existing_count: int, at: date, *, separator: str = "-"
) -> str:
    """Return ``(PREFIX) YYYY/MM/DD-NNN`` with NNN = ``existing_count + 1``.

    ``at`` is used as given, so callers convert to local calendar time first.
    The count is not checked for uniqueness; two creations reading the same
    count produce the same identifier.
    """
    if existing_count < 0:
        raise ValueError("existing_count must be non-negative")
    sequence = f"{existing_count + 1:03d}"
    return f"({prefix}) {at.year:04d}/{at.month:02d}/{at.day:02d}{separator}{sequence}"
