"""
In-memory record store.

Holds leave records for the lifetime of the process. Records are keyed by
the (claim_code, national_id) pair; duplicates are allowed and the first
inserted record wins on lookup.
"""

import logging
from collections.abc import Iterable, Mapping
from threading import Lock
from typing import Any, Optional

from leave_portal.leave.days import days
from leave_portal.leave.models import LeaveRecord

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Volatile repository of LeaveRecord values.

    A lock serializes mutation so the store stays consistent should handlers
    ever run on worker threads. The critical sections never await.
    """

    def __init__(self) -> None:
        self._records: list[LeaveRecord] = []
        self._index: dict[tuple[str, str], LeaveRecord] = {}
        self._lock = Lock()

    @classmethod
    def from_seed(cls, records: Iterable[Mapping[str, Any]]) -> "RecordStore":
        """Build a store and append every seed record in order."""
        store = cls()
        for record in records:
            store.append(record)
        logger.info(f"Record store seeded with {len(store)} record(s)")
        return store

    def __len__(self) -> int:
        return len(self._records)

    def find(self, claim_code: str, national_id: str) -> Optional[LeaveRecord]:
        """Return the first record matching both fields exactly, or None."""
        return self._index.get((claim_code, national_id))

    def append(self, fields: Mapping[str, Any] | LeaveRecord) -> LeaveRecord:
        """
        Store a new record and return it with its derived day count.

        Any caller-supplied day count is discarded and recomputed from the
        start and end dates.

        Args:
            fields: Record fields (snake_case or camelCase) or a LeaveRecord.

        Returns:
            The stored LeaveRecord.
        """
        if isinstance(fields, LeaveRecord):
            data = fields.model_dump(exclude={"inclusive_day_count"})
        else:
            data = {
                key: value
                for key, value in fields.items()
                if key not in ("inclusive_day_count", "inclusiveDayCount")
            }
        draft = LeaveRecord.model_validate(data)
        record = draft.model_copy(
            update={"inclusive_day_count": days(draft.start_date, draft.end_date)}
        )

        with self._lock:
            self._records.append(record)
            self._index.setdefault(record.key, record)
        return record

    def list(self) -> list[LeaveRecord]:
        """Return a snapshot of all records in insertion order."""
        with self._lock:
            return list(self._records)
