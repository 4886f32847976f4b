# ============================================================
# Record store
# ============================================================
import re
import threading
from typing import Protocol

from hrflow.core.errors import StateCorruption
from hrflow.domain.workflow.entities import Record


class RecordRepositoryProtocol(Protocol):
    def get(self, record_id: str) -> Record | None:
        """Get a record by id"""
        ...

    def list(self) -> list[Record]:
        """All records in insertion order"""
        ...

    def next_id(self, prefix: str) -> str:
        """Reserve an id unique within the store"""
        ...

    def add(self, record: Record) -> Record:
        """Insert a new record"""
        ...

    def replace(self, record: Record, *, expected_version: int) -> bool:
        """Swap in a new version if the stored one still has ``expected_version``"""
        ...

    def remove(self, record_id: str, *, expected_version: int) -> bool:
        """Delete a record if the stored one still has ``expected_version``"""
        ...


class InMemoryRecordRepository(RecordRepositoryProtocol):
    """Process-local record collection.

    A single lock serializes writers; ``replace`` and ``remove`` are
    compare-and-swap on the record version so a stale read never overwrites
    a newer write.
    """

    def __init__(self, records: list[Record] | None = None) -> None:
        self._records: dict[str, Record] = {}
        self._lock = threading.RLock()
        self._counters: dict[str, int] = {}
        for record in records or []:
            self.add(record)

    def get(self, record_id: str) -> Record | None:
        with self._lock:
            return self._records.get(record_id)

    def list(self) -> list[Record]:
        with self._lock:
            return list(self._records.values())

    def next_id(self, prefix: str) -> str:
        with self._lock:
            counter = self._counters.get(prefix, 0)
            while True:
                counter += 1
                candidate = f"{prefix}-{counter:03d}"
                if candidate not in self._records:
                    break
            self._counters[prefix] = counter
            return candidate

    def add(self, record: Record) -> Record:
        with self._lock:
            if record.id in self._records:
                raise StateCorruption(f"Record id '{record.id}' already exists")
            self._records[record.id] = record
            self._bump_counter(record.id)
            return record

    def replace(self, record: Record, *, expected_version: int) -> bool:
        with self._lock:
            current = self._records.get(record.id)
            if current is None or current.version != expected_version:
                return False
            self._records[record.id] = record
            return True

    def remove(self, record_id: str, *, expected_version: int) -> bool:
        with self._lock:
            current = self._records.get(record_id)
            if current is None or current.version != expected_version:
                return False
            del self._records[record_id]
            return True

    def _bump_counter(self, record_id: str) -> None:
        # Seeded ids like "OFF-007" push the counter past them
        match = re.fullmatch(r"(.+)-(\d+)", record_id)
        if match:
            prefix, number = match.group(1), int(match.group(2))
            self._counters[prefix] = max(self._counters.get(prefix, 0), number)
