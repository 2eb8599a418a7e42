"""In-memory repository useful for development and unit tests."""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Dict, Mapping

from doctrack.application.use_cases import RecordRepository
from doctrack.domain.errors import NotFoundError
from doctrack.domain.models.record import TrackableRecord


class InMemoryRecordRepository(RecordRepository):
    def __init__(self, record_type: str) -> None:
        self.record_type = record_type
        self._store: Dict[str, TrackableRecord] = {}

    def list(self) -> list[TrackableRecord]:
        return sorted(self._store.values(), key=lambda record: record.created_at, reverse=True)

    def count(self) -> int:
        return len(self._store)

    def add(self, record: TrackableRecord) -> TrackableRecord:
        stored = replace(record, id=str(uuid.uuid4()))
        self._store[stored.id] = stored
        return stored

    def update(self, record_id: str, changes: Mapping[str, Any]) -> None:
        try:
            current = self._store[record_id]
        except KeyError as exc:
            raise NotFoundError(record_id) from exc
        self._store[record_id] = replace(current, **changes)

    def exists(self, record_id: str) -> bool:
        return record_id in self._store

    def get(self, record_id: str) -> TrackableRecord:
        try:
            return self._store[record_id]
        except KeyError as exc:
            raise NotFoundError(record_id) from exc
