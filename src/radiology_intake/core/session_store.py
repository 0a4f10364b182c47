# ============================================================================
# src/radiology_intake/core/session_store.py
# ============================================================================
"""
Session Store

In-memory, append-only collection of accepted extraction records for the
current browser session. Insertion order is preserved; the only way to remove
records is a full reset.
"""

import logging
from typing import Iterable, Iterator, List, Tuple

from .models import SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:

    def __init__(self):
        self._records: List[SessionRecord] = []

    def append(self, record: SessionRecord) -> None:
        self._records.append(record)
        logger.debug(f"Stored record {record.id} (key_id={record.key_id})")

    def append_many(self, records: Iterable[SessionRecord]) -> None:
        added = list(records)
        self._records.extend(added)
        logger.info(f"Stored {len(added)} records ({len(self._records)} in session)")

    def reset(self) -> None:
        """Clear the entire session. Irreversible."""
        logger.info(f"Session reset, discarding {len(self._records)} records")
        self._records = []

    @property
    def records(self) -> Tuple[SessionRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SessionRecord]:
        return iter(tuple(self._records))

    def __bool__(self) -> bool:
        return bool(self._records)
