from .memory import InMemoryRecordRepository
from .db import DjangoRecordRepository

__all__ = ["InMemoryRecordRepository", "DjangoRecordRepository"]
