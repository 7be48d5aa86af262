"""
Evaluator-Type Score Aggregator
eval360/scoring/evaluator_scores.py

Per evaluator type, a two-level average:

    mean_q     = mean of the type's numeric answers to question q
    type score = Σ mean_q / number of questions the type answered

Averaging per-question means keeps a question answered by many raters from
outweighing one answered by few.
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from eval360.models.aggregation import AggregatedQuestion, ScoreTree, TypeScore
from eval360.models.enumerations import EvaluatorType
from eval360.models.policy import ScoringPolicy
from eval360.scoring import statistics


class EvaluatorTypeScoreAggregator:
    def by_type(
        self,
        aggregated_responses: Mapping[str, AggregatedQuestion],
        policy: Optional[ScoringPolicy] = None,
        score_trees: Optional[Mapping[EvaluatorType, Sequence[ScoreTree]]] = None,
    ) -> Dict[EvaluatorType, TypeScore]:
        """
        Args:
            aggregated_responses: Per-question buckets with normalized values.
            policy: Supplies each type's weight and consensus scale.
            score_trees: Optional per-evaluator score trees grouped by type,
                used for the per-type category breakdown.

        Returns:
            TypeScore per evaluator type that appears in the responses, in
            ``EvaluatorType`` declaration order.
        """
        policy = policy or ScoringPolicy()

        count: Dict[EvaluatorType, int] = defaultdict(int)
        question_count: Dict[EvaluatorType, int] = defaultdict(int)
        sum_of_means: Dict[EvaluatorType, float] = defaultdict(float)
        pooled: Dict[EvaluatorType, List[float]] = defaultdict(list)
        evaluators: Dict[EvaluatorType, set] = defaultdict(set)

        for question in aggregated_responses.values():
            for evaluator_type, records in question.responses_by_type.items():
                evaluators[evaluator_type].update(r.evaluator_id for r in records)
                values = [r.normalized for r in records if r.normalized is not None]
                if not values:
                    continue
                count[evaluator_type] += len(values)
                question_count[evaluator_type] += 1
                sum_of_means[evaluator_type] += statistics.compute(values).mean
                pooled[evaluator_type].extend(values)

        scores: Dict[EvaluatorType, TypeScore] = {}
        for evaluator_type in EvaluatorType:
            if evaluator_type not in evaluators:
                continue
            answered = question_count[evaluator_type]
            scores[evaluator_type] = TypeScore(
                evaluator_type=evaluator_type,
                count=count[evaluator_type],
                evaluator_count=len(evaluators[evaluator_type]),
                question_count=answered,
                weight=policy.weight_for(evaluator_type),
                score=sum_of_means[evaluator_type] / answered if answered > 0 else None,
                category_scores=_category_means((score_trees or {}).get(evaluator_type, [])),
                consensus_index=statistics.consensus_index(
                    pooled[evaluator_type], policy.consensus_max_std_dev
                ),
                is_valid=count[evaluator_type] > 0,
            )
        return scores


def _category_means(trees: Sequence[ScoreTree]) -> Dict[str, Optional[float]]:
    """Mean category score across evaluators; None where no evaluator had it in scope."""
    collected: Dict[str, List[float]] = {}
    for tree in trees:
        for category in tree.category_scores:
            collected.setdefault(category.category_id, [])
            if category.total_weight > 0:
                collected[category.category_id].append(category.score)
    return {
        category_id: (sum(values) / len(values) if values else None)
        for category_id, values in collected.items()
    }
