"""
Report insights — the numbers the narrative report consumes.

    strengths / weaknesses   top / bottom 3 scored categories, with the score as
                             a 0..100 percentage of the test scale
    self-other gap           self score − weighted score of every other type
"""

from typing import List, Mapping, Optional

from eval360.models.aggregation import (
    CategoryGap,
    RankedCategory,
    ReportInsights,
    SessionCategoryScore,
    TypeScore,
)
from eval360.models.enumerations import EvaluatorType
from eval360.models.policy import ScoringPolicy
from eval360.models.test_definition import Scale
from eval360.scoring.composer import OverallScoreComposer
from eval360.scoring.normalizer import ScaleNormalizer
from eval360.scoring.utils import round_half_up

TOP_N = 3


class InsightsBuilder:
    def __init__(self, policy: Optional[ScoringPolicy] = None, top_n: int = TOP_N):
        self.policy = policy or ScoringPolicy()
        self.composer = OverallScoreComposer(self.policy)
        self.top_n = top_n
        self.normalizer = ScaleNormalizer()

    def build(
        self,
        category_scores: Mapping[str, SessionCategoryScore],
        scores_by_type: Mapping[EvaluatorType, TypeScore],
        scale: Optional[Scale] = None,
    ) -> ReportInsights:
        scale = scale or Scale()
        scored = [
            RankedCategory(
                category_id=c.category_id,
                category_name=c.category_name,
                score=c.score,
                percentage=round_half_up(self.normalizer.to_percentage(c.score, scale)),
            )
            for c in category_scores.values()
            if not c.is_excluded and c.score is not None
        ]
        # sorted() is stable: ties keep definition order in both lists.
        strengths = sorted(scored, key=lambda c: -c.score)[: self.top_n]
        weaknesses = sorted(scored, key=lambda c: c.score)[: self.top_n]

        self_score_entry = scores_by_type.get(EvaluatorType.SELF)
        others = {t: s for t, s in scores_by_type.items() if t != EvaluatorType.SELF}

        self_score = self_score_entry.score if self_score_entry and self_score_entry.is_valid else None
        others_score = self.composer.compose(others) if any(s.is_valid for s in others.values()) else None
        gap = self_score - others_score if self_score is not None and others_score is not None else None

        return ReportInsights(
            strengths=strengths,
            weaknesses=weaknesses,
            self_score=self_score,
            others_score=others_score,
            self_other_gap=gap,
            category_gaps=self._category_gaps(self_score_entry, others),
        )

    def _category_gaps(
        self,
        self_entry: Optional[TypeScore],
        others: Mapping[EvaluatorType, TypeScore],
    ) -> List[CategoryGap]:
        if self_entry is None:
            return []
        gaps: List[CategoryGap] = []
        for category_id, self_value in self_entry.category_scores.items():
            if self_value is None:
                continue
            weighted_sum = 0.0
            total_weight = 0.0
            for evaluator_type, type_score in others.items():
                value = type_score.category_scores.get(category_id)
                if value is None:
                    continue
                weight = self.policy.weight_for(evaluator_type)
                weighted_sum += value * weight
                total_weight += weight
            if total_weight == 0:
                continue
            others_value = weighted_sum / total_weight
            gaps.append(
                CategoryGap(
                    category_id=category_id,
                    self_score=self_value,
                    others_score=others_value,
                    gap=self_value - others_value,
                )
            )
        return gaps
