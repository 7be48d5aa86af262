"""
Anonymity Gate
eval360/scoring/anonymity.py

Counts submitted responses per evaluator type against the minimum number of
respondents required before that type's scores may be disclosed.

    percentage = round(actual / required × 100)      (0 when nobody answered)
    is_valid   = every configured type meets its threshold

The gate only reports status. ``redact()`` builds the report view that the
session endpoint serves with ``redacted=true``.
"""

from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence

import structlog

from eval360.models.aggregation import (
    AggregationResult,
    AnonymityTypeStatus,
    AnonymityValidation,
    AnonymityViolation,
)
from eval360.models.enumerations import EvaluatorType
from eval360.models.policy import DEFAULT_ANONYMITY_THRESHOLDS
from eval360.models.response import EvaluatorResponse
from eval360.scoring.utils import round_half_up

logger = structlog.get_logger(__name__)


class AnonymityGate:
    def validate(
        self,
        responses: Sequence[EvaluatorResponse],
        thresholds: Optional[Mapping[EvaluatorType, int]] = None,
    ) -> AnonymityValidation:
        """
        Args:
            responses: Submitted responses of one session.
            thresholds: Minimum respondents per type; defaults to
                peer 3, subordinate 3, external 1, manager 1.

        Examples:
            >>> gate = AnonymityGate()
            >>> peers = [EvaluatorResponse(evaluator_id=f"p{i}", evaluator_type="peer") for i in range(2)]
            >>> gate.validate(peers, {EvaluatorType.PEER: 3}).status[EvaluatorType.PEER].percentage
            67
        """
        if thresholds is None:
            thresholds = DEFAULT_ANONYMITY_THRESHOLDS
        thresholds = {EvaluatorType(t): required for t, required in thresholds.items()}

        counts = Counter(r.evaluator_type for r in responses)
        status: Dict[EvaluatorType, AnonymityTypeStatus] = {}
        violations: List[AnonymityViolation] = []

        for evaluator_type in _ordered(thresholds):
            required = thresholds[evaluator_type]
            actual = counts.get(evaluator_type, 0)
            met = actual >= required
            critical = 0 < actual < required
            status[evaluator_type] = AnonymityTypeStatus(
                required=required,
                actual=actual,
                met=met,
                percentage=int(round_half_up(actual / required * 100, 0)) if actual > 0 else 0,
                critical=critical,
            )
            if critical:
                violations.append(
                    AnonymityViolation(
                        evaluator_type=evaluator_type,
                        actual=actual,
                        required=required,
                        severity="critical" if actual == 1 else "warning",
                    )
                )

        is_valid = all(s.met for s in status.values())
        if not is_valid:
            logger.info(
                "anonymity_threshold_not_met",
                unmet=[t.value for t, s in status.items() if not s.met],
                total_evaluators=len(responses),
            )

        return AnonymityValidation(
            is_valid=is_valid,
            status=status,
            total_evaluators=len(responses),
            critical_violations=violations,
            should_hide_data=any(v.severity == "critical" for v in violations),
        )

    def hidden_types(self, status: Mapping[EvaluatorType, AnonymityTypeStatus]) -> List[EvaluatorType]:
        """Types that answered but are below threshold and must not be shown individually."""
        return [t for t, s in status.items() if not s.met and s.actual > 0]

    def redact(self, result: AggregationResult) -> AggregationResult:
        """
        Copy of ``result`` with per-type data removed for hidden types.

        The session-wide numbers (overall score, category scores) stay, as
        they blend every evaluator type together.
        """
        hidden = set(self.hidden_types(result.anonymity_status))
        if not hidden:
            return result

        redacted = result.model_copy(deep=True)
        for evaluator_type in hidden:
            type_score = redacted.scores_by_type.get(evaluator_type)
            if type_score is not None:
                type_score.score = None
                type_score.category_scores = {}
                type_score.consensus_index = 0.0
        for question in redacted.aggregated_responses.values():
            for evaluator_type in hidden:
                question.responses_by_type.pop(evaluator_type, None)
        return redacted

    def check_version_compatibility(self, responses: Sequence[EvaluatorResponse]) -> Optional[str]:
        """Warning when responses were collected against different test versions."""
        versions = sorted({r.test_version for r in responses if r.test_version})
        if len(versions) > 1:
            return (
                f"Respuestas de diferentes versiones del test ({', '.join(versions)}); "
                "los resultados pueden no ser directamente comparables"
            )
        return None


def _ordered(thresholds: Mapping[EvaluatorType, int]) -> List[EvaluatorType]:
    order = list(EvaluatorType)
    return sorted(thresholds, key=order.index)
