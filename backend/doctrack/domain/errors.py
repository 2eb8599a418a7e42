"""Errors raised by the record lifecycle and its persistence boundary."""

from __future__ import annotations


class RecordLifecycleError(Exception):
    """Base class for every error surfaced by the tracking core."""


class ValidationError(RecordLifecycleError):
    """Missing remarks or mandatory fields; nothing was mutated."""


class IllegalTransitionError(RecordLifecycleError):
    """The record's current status does not allow the requested transition."""


class StaleRecordError(RecordLifecycleError):
    """The caller's copy of a record no longer exists in the authoritative store."""


class RepositoryError(RecordLifecycleError):
    """Opaque failure reported by the persistence collaborator."""


class NotFoundError(RepositoryError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record {record_id} not found")
        self.record_id = record_id
