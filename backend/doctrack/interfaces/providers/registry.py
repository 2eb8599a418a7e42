"""Simple dependency injection container with provider registry support."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, TypeVar

T = TypeVar("T")


@dataclass
class ProviderRegistry(Generic[T]):
    """Maps provider keys (e.g., record types) to lazily constructed instances."""

    factory_map: Dict[str, Callable[[], T]] = field(default_factory=dict)
    _cache: Dict[str, T] = field(default_factory=dict, init=False, repr=False)

    def register(self, key: str, factory: Callable[[], T]) -> None:
        if key in self.factory_map:
            raise ValueError(f"Provider '{key}' already registered")
        self.factory_map[key] = factory
        if key in self._cache:
            del self._cache[key]

    def resolve(self, key: str) -> T:
        if key in self._cache:
            return self._cache[key]
        try:
            factory = self.factory_map[key]
        except KeyError as exc:
            raise KeyError(f"Provider '{key}' not found") from exc
        instance = factory()
        self._cache[key] = instance
        return instance

    def keys(self) -> list[str]:
        return list(self.factory_map)


@dataclass
class Container:
    """Minimal DI container holding one repository per record type."""

    repositories: ProviderRegistry[Any] = field(default_factory=ProviderRegistry)
    record_types: Dict[str, Any] = field(default_factory=dict)

    def resolve_repository(self, record_type: str) -> Any:
        return self.repositories.resolve(record_type)

    def resolve_record_type(self, key: str) -> Any:
        try:
            return self.record_types[key]
        except KeyError as exc:
            raise KeyError(f"Record type '{key}' not found") from exc

    def default_actor(self) -> str:
        return self._default("DEFAULT_ACTOR", "Unknown")

    def _default(self, attr: str, fallback: str) -> str:
        try:
            from django.conf import settings
            from django.core.exceptions import ImproperlyConfigured
        except Exception:  # pragma: no cover - settings not ready
            return fallback
        try:
            return getattr(settings, attr, fallback)
        except ImproperlyConfigured:
            return fallback

    def configure(
        self, record_types: Dict[str, Any], factory: Callable[[str], Any]
    ) -> "Container":
        """Register ``factory(key)`` for every record type."""
        self.record_types.update(record_types)
        for key in record_types:
            self.repositories.register(key, lambda key=key: factory(key))
        return self
