"""Application bootstrap utilities: dependency container and per-type repositories."""

from __future__ import annotations

from typing import Any

from doctrack.domain.models.record_types import build_catalog
from doctrack.infrastructure.repositories import DjangoRecordRepository, InMemoryRecordRepository
from doctrack.interfaces.providers.registry import Container


def _setting(name: str, fallback: Any) -> Any:
    try:  # pragma: no cover - settings access optional during tests
        from django.conf import settings

        return getattr(settings, name, fallback)
    except Exception:
        return fallback


def _build_repository(record_type: str) -> InMemoryRecordRepository | DjangoRecordRepository:
    backend = _setting("RECORD_REPOSITORY", "memory")
    if backend == "memory":
        return InMemoryRecordRepository(record_type)
    return DjangoRecordRepository(record_type)


catalog = build_catalog(_setting("EDIT_REJECTED_RECORD_TYPES", ()))
container = Container().configure(catalog, _build_repository)
