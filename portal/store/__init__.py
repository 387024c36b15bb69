from portal.store.base import RecordStore
from portal.store.memory import MemoryRecordStore
from portal.store.sql import SqlRecordStore

__all__ = ["RecordStore", "MemoryRecordStore", "SqlRecordStore"]
