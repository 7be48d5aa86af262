"""
Aggregation Service — session-level wrapper around the orchestrator
eval360/services/aggregation_service.py

Called once per session when the last evaluator submits (the trigger may
fire more than once). Keeps one AggregationRecord per session:

    pending   → created before computing, only if no record exists
    completed → result is valid
    failed    → result has validation errors, or the computation raised

Usage:
    from eval360.core.dependencies import get_aggregation_service

    svc = get_aggregation_service()
    record = svc.process_submission("session-42", test_definition, responses)
    print(record.status, record.result.overall_score)
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

import structlog

from eval360.core.exceptions import InputError
from eval360.models.aggregation import AggregationRecord
from eval360.models.enumerations import AggregationStatus
from eval360.models.response import EvaluatorResponse
from eval360.models.test_definition import TestDefinition
from eval360.repositories.aggregation_repository import AggregationRepository
from eval360.scoring.orchestrator import AggregationOrchestrator

logger = structlog.get_logger(__name__)


class AggregationService:
    """Runs the orchestrator for a session and persists the outcome."""

    def __init__(
        self,
        orchestrator: Optional[AggregationOrchestrator] = None,
        repository: Optional[AggregationRepository] = None,
    ) -> None:
        self._orchestrator = orchestrator or AggregationOrchestrator()
        self._repository = repository or AggregationRepository()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_submission(
        self,
        session_id: str,
        test_definition: TestDefinition,
        responses: Sequence[EvaluatorResponse],
    ) -> AggregationRecord:
        """
        Aggregate a session once.

        A second call for the same session returns the existing record
        without recomputing; use ``recompute`` to force a new run.
        """
        record, created = self._repository.create_if_absent(session_id)
        if not created:
            logger.info("aggregation_already_exists", session_id=session_id, status=record.status.value)
            return record
        return self._run(record, test_definition, responses)

    def recompute(
        self,
        session_id: str,
        test_definition: TestDefinition,
        responses: Sequence[EvaluatorResponse],
    ) -> AggregationRecord:
        """Re-run the aggregation and overwrite whatever record exists."""
        record, _ = self._repository.create_if_absent(session_id)
        return self._run(record, test_definition, responses)

    def get(self, session_id: str, redacted: bool = False) -> AggregationRecord:
        """
        Raises AggregationNotFoundException when the session has no record.

        With ``redacted`` the result is the report view: per-type data of
        evaluator types below their anonymity threshold is removed.
        """
        record = self._repository.get(session_id)
        if redacted and record.result is not None:
            record.result = self._orchestrator.anonymity_gate.redact(record.result)
        return record

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(
        self,
        record: AggregationRecord,
        test_definition: TestDefinition,
        responses: Sequence[EvaluatorResponse],
    ) -> AggregationRecord:
        submitted = self._submitted(responses)
        log = logger.bind(session_id=record.session_id, test_id=test_definition.id)
        log.info("aggregation_started", responses=len(responses), submitted=len(submitted))

        record.result = None
        record.error = None
        try:
            result = self._orchestrator.compute(test_definition, submitted)
        except InputError as e:
            log.warning("aggregation_input_error", error=str(e))
            record.status = AggregationStatus.FAILED
            record.error = str(e)
        except Exception as e:
            log.exception("aggregation_failed")
            record.status = AggregationStatus.FAILED
            record.error = str(e)
        else:
            record.result = result
            record.status = AggregationStatus.COMPLETED if result.is_valid else AggregationStatus.FAILED
            if not result.is_valid:
                record.error = "; ".join(result.validation_errors)
            log.info(
                "aggregation_finished",
                status=record.status.value,
                overall_score=result.overall_score,
                is_valid=result.is_valid,
            )

        record.processed_at = datetime.now(timezone.utc)
        return self._repository.save(record)

    @staticmethod
    def _submitted(responses: Sequence[EvaluatorResponse]) -> List[EvaluatorResponse]:
        return [r for r in responses if r.is_submitted]

