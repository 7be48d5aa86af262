"""
Overall Score Composer
eval360/scoring/composer.py

360 aggregation (by evaluator type):
    overall = Σ(score_t × w_t) / Σ(w_t)     over types with is_valid and count > 0

Individual report (by category):
    overall = Σ(category weighted_score) / Σ(category weight)   over non-excluded categories

Absent types drop out of both sums, which renormalizes the remaining
weights. Nothing valid → 0.0, never NaN.
"""

from typing import Iterable, Mapping, Optional

from eval360.models.aggregation import SessionCategoryScore, TypeScore
from eval360.models.enumerations import EvaluatorType, OverallScoreMode
from eval360.models.policy import ScoringPolicy


class OverallScoreComposer:
    def __init__(self, policy: Optional[ScoringPolicy] = None):
        self.policy = policy or ScoringPolicy()

    def compose(self, scores_by_type: Mapping[EvaluatorType, TypeScore]) -> float:
        """
        Examples:
            >>> composer = OverallScoreComposer()
            >>> round(composer.compose({
            ...     EvaluatorType.MANAGER: TypeScore(evaluator_type="manager", score=4, count=2, is_valid=True),
            ...     EvaluatorType.PEER: TypeScore(evaluator_type="peer", score=3, count=5, is_valid=True),
            ... }), 3)  # (4×0.3 + 3×0.25) / 0.55
            3.545
        """
        weighted_sum = 0.0
        total_weight = 0.0
        for evaluator_type, type_score in scores_by_type.items():
            if not (type_score.is_valid and type_score.count > 0) or type_score.score is None:
                continue
            weight = self.policy.weight_for(EvaluatorType(evaluator_type))
            weighted_sum += type_score.score * weight
            total_weight += weight
        return weighted_sum / total_weight if total_weight > 0 else 0.0

    def compose_categories(self, category_scores: Iterable[SessionCategoryScore]) -> float:
        weighted_sum = 0.0
        total_weight = 0.0
        for category in category_scores:
            if category.is_excluded or category.score is None:
                continue
            weighted_sum += category.score * category.weight
            total_weight += category.weight
        return weighted_sum / total_weight if total_weight > 0 else 0.0

    def headline(self, by_type: float, by_category: float) -> float:
        """Pick the overall score reported for the configured report context."""
        if self.policy.overall_score_mode == OverallScoreMode.CATEGORY:
            return by_category
        return by_type
