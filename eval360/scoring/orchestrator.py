"""
Aggregation Orchestrator
eval360/scoring/orchestrator.py

Single entry point: {test definition snapshot, submitted responses, policy}
→ AggregationResult.

Pipeline:
  0. Structural validation of the snapshot      → InputError (only exception raised)
  1. AnonymityGate                              → anonymity status per evaluator type
  2. Per-question buckets (normalized values)   → aggregated_responses
     Per-evaluator score trees                  → category / subdimension rollups
     EvaluatorTypeScoreAggregator               → scores_by_type
  3. OverallScoreComposer                       → overall score(s)
  4. Metrics                                    → completion, response rate, consensus
  5. Validation                                 → is_valid, validation_errors, warnings

compute() holds no state between calls: the same inputs always give an equal
result, so retries and duplicate triggers are safe as long as the caller
de-duplicates writes. Responses are sorted before use, so their order does
not matter either.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from eval360.models.aggregation import (
    AggregatedQuestion,
    AggregationMetrics,
    AggregationResult,
    AnonymityValidation,
    AnswerRecord,
    ScoreTree,
    SessionCategoryScore,
)
from eval360.models.enumerations import EvaluatorType, QuestionType
from eval360.models.policy import ScoringPolicy
from eval360.models.response import EvaluatorResponse
from eval360.models.test_definition import TestDefinition
from eval360.scoring import statistics
from eval360.scoring.anonymity import AnonymityGate
from eval360.scoring.composer import OverallScoreComposer
from eval360.scoring.conditional_rules import ConditionalRuleEvaluator
from eval360.scoring.evaluator_scores import EvaluatorTypeScoreAggregator
from eval360.scoring.insights import InsightsBuilder
from eval360.scoring.normalizer import ScaleNormalizer
from eval360.scoring.score_tree import ScoreTreeBuilder
from eval360.scoring.utils import is_answered, round_half_up, to_number

logger = structlog.get_logger(__name__)

# Validation messages
NO_RESPONSES = "No hay respuestas para agregar"
NO_NUMERIC_ANSWERS = "No hay respuestas numéricas para agregar"
ANONYMITY_NOT_MET = "No se cumplen los umbrales de anonimato requeridos"
ANONYMITY_UNMET_TYPES = "Tipos por debajo del umbral"
SCORE_OUT_OF_RANGE = "Score global fuera del rango esperado"
LOW_COMPLETION = "Tasa de completitud baja"
UNKNOWN_QUESTIONS = "Respuestas ignoradas a preguntas fuera del test"

_TYPE_ORDER = {t: i for i, t in enumerate(EvaluatorType)}


class AggregationOrchestrator:
    """Run the full scoring pipeline for one 360 session."""

    def __init__(self, policy: Optional[ScoringPolicy] = None):
        self.policy = policy or ScoringPolicy()

        self.normalizer = ScaleNormalizer()
        self.rule_evaluator = ConditionalRuleEvaluator()
        self.tree_builder = ScoreTreeBuilder(rule_evaluator=self.rule_evaluator)
        self.anonymity_gate = AnonymityGate()
        self.type_aggregator = EvaluatorTypeScoreAggregator()
        self.composer = OverallScoreComposer(self.policy)
        self.insights_builder = InsightsBuilder(self.policy)

    # ------------------------------------------------------------------
    # Main pipeline
    # ------------------------------------------------------------------

    def compute(
        self,
        test_definition: TestDefinition,
        responses: Sequence[EvaluatorResponse],
    ) -> AggregationResult:
        """
        Args:
            test_definition: Frozen snapshot attached to the session.
            responses: Submitted responses only; status filtering is the
                caller's job.

        Returns:
            AggregationResult. Data-quality problems (no responses, anonymity
            not met) are reported in ``validation_errors``, not raised.

        Raises:
            InputError: the snapshot references unknown ids.
        """
        test_definition.validate_structure()
        responses = sorted(
            responses,
            key=lambda r: (_TYPE_ORDER[r.evaluator_type], r.evaluator_id, r.id or ""),
        )

        # 1. Anonymity
        anonymity = self.anonymity_gate.validate(responses, self.policy.anonymity_thresholds)

        # 2. Per-question buckets, per-evaluator trees, per-type scores
        aggregated, unknown_questions = self._aggregate_by_question(test_definition, responses)

        trees_by_type: Dict[EvaluatorType, List[ScoreTree]] = defaultdict(list)
        for response in responses:
            trees_by_type[response.evaluator_type].append(
                self.tree_builder.build(test_definition, response.answer_values())
            )

        scores_by_type = self.type_aggregator.by_type(aggregated, self.policy, trees_by_type)
        for evaluator_type, type_score in scores_by_type.items():
            type_status = anonymity.status.get(evaluator_type)
            type_score.anonymity_met = type_status.met if type_status else True

        all_trees = [tree for trees in trees_by_type.values() for tree in trees]
        category_scores = self._session_category_scores(test_definition, all_trees)

        # 3. Overall score
        overall_by_type = self.composer.compose(scores_by_type)
        category_overall = self.composer.compose_categories(category_scores.values())
        overall_score = self.composer.headline(overall_by_type, category_overall)

        # 4. Metrics
        metrics = self._metrics(responses, aggregated, all_trees)

        # 5. Validation
        errors, warnings = self._validate(
            test_definition, responses, aggregated, anonymity, overall_score, metrics, unknown_questions
        )

        result = AggregationResult(
            test_id=test_definition.id,
            test_version=test_definition.version,
            total_responses=len(responses),
            valid_responses=sum(1 for r in responses if r.is_submitted),
            aggregated_responses=aggregated,
            scores_by_type=scores_by_type,
            category_scores=category_scores,
            overall_score=overall_score,
            overall_score_by_type=overall_by_type,
            category_overall_score=category_overall,
            metrics=metrics,
            anonymity_status=anonymity.status,
            insights=self.insights_builder.build(category_scores, scores_by_type, test_definition.scale),
            is_valid=not errors,
            validation_errors=errors,
            warnings=warnings,
        )

        logger.info(
            "aggregation_computed",
            test_id=test_definition.id,
            test_version=test_definition.version,
            total_responses=result.total_responses,
            overall_score=round_half_up(overall_score),
            is_valid=result.is_valid,
            validation_errors=len(errors),
            warnings=len(warnings),
        )
        return result

    # ------------------------------------------------------------------
    # Helper methods
    # ------------------------------------------------------------------

    def _aggregate_by_question(
        self,
        test_definition: TestDefinition,
        responses: Sequence[EvaluatorResponse],
    ) -> Tuple[Dict[str, AggregatedQuestion], List[str]]:
        """Group answers per question and evaluator type, in definition order."""
        known = {q.id for q in test_definition.questions}
        unknown = sorted({qid for r in responses for qid in r.answers if qid not in known})
        if unknown:
            logger.warning("unknown_questions_ignored", test_id=test_definition.id, question_ids=unknown)

        scale = test_definition.scale
        aggregated: Dict[str, AggregatedQuestion] = {}

        for question in test_definition.questions:
            by_type: Dict[EvaluatorType, List[AnswerRecord]] = {}
            for response in responses:
                answer = response.answers.get(question.id)
                if answer is None or not is_answered(answer.value):
                    continue
                normalized = (
                    self.normalizer.normalize(answer.value, question.is_negative, scale, question.type)
                    if question.is_scored
                    else None
                )
                by_type.setdefault(response.evaluator_type, []).append(
                    AnswerRecord(
                        evaluator_id=response.evaluator_id,
                        value=answer.value,
                        normalized=normalized,
                        answered_at=answer.answered_at,
                    )
                )
            if not by_type:
                continue

            records = [r for bucket in by_type.values() for r in bucket]
            values = [r.normalized for r in records if r.normalized is not None]
            stats = statistics.compute(values)

            distribution: Dict[str, int] = {}
            if question.type == QuestionType.LIKERT:
                raw_numbers = [to_number(r.value) for r in records]
                distribution = statistics.distribution([v for v in raw_numbers if v is not None], scale)

            aggregated[question.id] = AggregatedQuestion(
                question_id=question.id,
                question_text=question.text,
                question_type=question.type,
                category_id=question.category_id,
                subdimension_id=question.subdimension_id,
                responses_by_type=by_type,
                statistics=stats,
                aggregated_score=stats.mean if values else None,
                distribution=distribution,
                is_valid=bool(values) if question.is_scored else bool(records),
            )

        return aggregated, unknown

    def _session_category_scores(
        self,
        test_definition: TestDefinition,
        trees: Sequence[ScoreTree],
    ) -> Dict[str, SessionCategoryScore]:
        """Mean of each category across evaluators; evaluators who excluded it or had nothing to score do not count."""
        session_scores: Dict[str, SessionCategoryScore] = {}
        for index, category in enumerate(test_definition.categories):
            per_evaluator = [tree.category_scores[index] for tree in trees]
            included = [c.score for c in per_evaluator if not c.is_excluded and c.total_weight > 0]
            excluded_count = sum(1 for c in per_evaluator if c.is_excluded)
            session_scores[category.id] = SessionCategoryScore(
                category_id=category.id,
                category_name=category.name,
                weight=category.weight,
                score=sum(included) / len(included) if included else None,
                is_excluded=bool(per_evaluator) and excluded_count == len(per_evaluator),
                evaluator_count=len(included),
                excluded_count=excluded_count,
            )
        return session_scores

    def _metrics(
        self,
        responses: Sequence[EvaluatorResponse],
        aggregated: Dict[str, AggregatedQuestion],
        trees: Sequence[ScoreTree],
    ) -> AggregationMetrics:
        total = len(responses)
        submitted = sum(1 for r in responses if r.is_submitted)
        completion_rate = submitted / total * 100 if total > 0 else 0.0

        answered = sum(t.answered_questions for t in trees)
        expected = sum(t.total_questions for t in trees)
        response_rate = answered / expected * 100 if expected > 0 else 0.0

        pool = [
            record.normalized
            for question in aggregated.values()
            for bucket in question.responses_by_type.values()
            for record in bucket
            if record.normalized is not None
        ]

        return AggregationMetrics(
            completion_rate=round_half_up(completion_rate),
            response_rate=round_half_up(response_rate),
            consensus_index=statistics.consensus_index(pool, self.policy.consensus_max_std_dev),
        )

    def _validate(
        self,
        test_definition: TestDefinition,
        responses: Sequence[EvaluatorResponse],
        aggregated: Dict[str, AggregatedQuestion],
        anonymity: AnonymityValidation,
        overall_score: float,
        metrics: AggregationMetrics,
        unknown_questions: List[str],
    ) -> Tuple[List[str], List[str]]:
        errors: List[str] = []
        warnings: List[str] = []

        if not responses:
            errors.append(NO_RESPONSES)
        elif not any(q.aggregated_score is not None for q in aggregated.values()):
            errors.append(NO_NUMERIC_ANSWERS)

        if not anonymity.is_valid:
            unmet = ", ".join(
                f"{t.value} ({s.actual}/{s.required})" for t, s in anonymity.status.items() if not s.met
            )
            errors.append(ANONYMITY_NOT_MET)
            errors.append(f"{ANONYMITY_UNMET_TYPES}: {unmet}")

        upper = test_definition.scale.max
        if overall_score < 0 or overall_score > upper:
            warnings.append(f"{SCORE_OUT_OF_RANGE} (0-{upper:g})")

        if metrics.completion_rate < self.policy.min_completion_rate:
            warnings.append(f"{LOW_COMPLETION} (< {self.policy.min_completion_rate:g}%)")

        version_warning = self.anonymity_gate.check_version_compatibility(responses)
        if version_warning:
            warnings.append(version_warning)

        if unknown_questions:
            warnings.append(f"{UNKNOWN_QUESTIONS}: {', '.join(unknown_questions)}")

        return errors, warnings
