"""
Subdimension Aggregator
eval360/scoring/subdimension_aggregator.py

Formula:
    score          = Σ(normalized_i × w_i) / Σ(w_i)     over answered numeric questions
    weighted_score = score × subdimension weight

A subdimension with questions always keeps its weight. When none of them has
a numeric answer (left blank, or open-text and multiple-choice only) it
scores 0, not None, so it stays visible in the category average. Only a
subdimension without any question carries no weight. Open-text and
multiple-choice answers count toward completion but never toward the score.
"""

from typing import Any, List, Mapping, Optional, Sequence

from eval360.models.aggregation import SubdimensionScore
from eval360.models.test_definition import QuestionBase, Scale, Subdimension
from eval360.scoring import statistics
from eval360.scoring.normalizer import ScaleNormalizer
from eval360.scoring.utils import is_answered


class SubdimensionAggregator:
    """Combine the answers inside one subdimension."""

    def __init__(self, normalizer: Optional[ScaleNormalizer] = None):
        self.normalizer = normalizer or ScaleNormalizer()

    def score(
        self,
        subdimension: Optional[Subdimension],
        questions: Sequence[QuestionBase],
        answers: Mapping[str, Any],
        scale: Scale,
    ) -> SubdimensionScore:
        """
        Args:
            subdimension: The subdimension, or None for the questions of a
                category that have no subdimension (implicit group, weight 1).
            questions: Candidate questions; filtered to this subdimension.
            answers: ``{question_id: raw value}`` for one evaluator.
            scale: Scale of the test definition.
        """
        subdimension_id = subdimension.id if subdimension else None
        own_questions = [q for q in questions if q.subdimension_id == subdimension_id]
        result = SubdimensionScore(
            subdimension_id=subdimension_id,
            subdimension_name=subdimension.name if subdimension else "",
            total_questions=len(own_questions),
        )
        if not own_questions:
            return result

        weight = subdimension.weight if subdimension else 1.0
        weighted_sum = 0.0
        question_weight = 0.0
        values: List[float] = []

        for question in own_questions:
            raw = answers.get(question.id)
            if not is_answered(raw):
                continue
            result.answered_questions += 1
            if not question.is_scored:
                continue
            normalized = self.normalizer.normalize(raw, question.is_negative, scale, question.type)
            if normalized is None:
                continue
            weighted_sum += normalized * question.weight
            question_weight += question.weight
            values.append(normalized)

        score = weighted_sum / question_weight if question_weight > 0 else 0.0

        result.score = score
        result.question_weight = question_weight
        result.total_weight = weight
        result.weighted_score = score * weight
        result.statistics = statistics.compute(values)
        return result
