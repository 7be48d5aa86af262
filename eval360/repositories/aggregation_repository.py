"""
Aggregation Repository — in-memory persistence of aggregation records
eval360/repositories/aggregation_repository.py

One record per session id. ``create_if_absent`` is the de-duplication point
for at-least-once submission triggers: under the lock, only the first caller
creates the pending record.
"""

import threading
from typing import Dict, Tuple

import structlog

from eval360.core.exceptions import AggregationNotFoundException
from eval360.models.aggregation import AggregationRecord

logger = structlog.get_logger(__name__)


class AggregationRepository:
    """Thread-safe store of AggregationRecord keyed by session id."""

    def __init__(self):
        self._records: Dict[str, AggregationRecord] = {}
        self._lock = threading.Lock()

    def create_if_absent(self, session_id: str) -> Tuple[AggregationRecord, bool]:
        """
        Returns:
            (record, created). ``created`` is False when a record already
            existed; that record is returned untouched.
        """
        with self._lock:
            existing = self._records.get(session_id)
            if existing is not None:
                return existing.model_copy(deep=True), False
            record = AggregationRecord(session_id=session_id)
            self._records[session_id] = record
            logger.info("aggregation_record_created", session_id=session_id)
            return record.model_copy(deep=True), True

    def save(self, record: AggregationRecord) -> AggregationRecord:
        with self._lock:
            self._records[record.session_id] = record.model_copy(deep=True)
        return record

    def get(self, session_id: str) -> AggregationRecord:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                raise AggregationNotFoundException(session_id)
            return record.model_copy(deep=True)

