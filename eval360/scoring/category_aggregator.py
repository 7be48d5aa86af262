"""
Category Aggregator
eval360/scoring/category_aggregator.py

Formula:
    score          = Σ subdimension weighted_score / Σ subdimension total_weight
    weighted_score = score × category weight

An excluded category returns score=None with zero weight, so it drops out
of the parent rollup instead of counting as a zero.

Scored questions without a subdimension form an implicit group of weight 1.
Open-text and multiple-choice questions outside any subdimension only count
toward completion.
"""

from typing import Any, List, Mapping, Optional, Sequence

from eval360.models.aggregation import CategoryScore, SubdimensionScore
from eval360.models.test_definition import Category, QuestionBase, Scale
from eval360.scoring import statistics
from eval360.scoring.conditional_rules import ConditionalRuleEvaluator
from eval360.scoring.normalizer import ScaleNormalizer
from eval360.scoring.subdimension_aggregator import SubdimensionAggregator
from eval360.scoring.utils import is_answered


class CategoryAggregator:
    """Roll subdimension scores up into a category score."""

    def __init__(
        self,
        subdimension_aggregator: Optional[SubdimensionAggregator] = None,
        rule_evaluator: Optional[ConditionalRuleEvaluator] = None,
    ):
        self.subdimension_aggregator = subdimension_aggregator or SubdimensionAggregator()
        self.rule_evaluator = rule_evaluator or ConditionalRuleEvaluator()

    @property
    def normalizer(self) -> ScaleNormalizer:
        return self.subdimension_aggregator.normalizer

    def score(
        self,
        category: Category,
        questions: Sequence[QuestionBase],
        answers: Mapping[str, Any],
        scale: Scale,
        is_excluded: bool = False,
        exclusion_reason: Optional[str] = None,
    ) -> CategoryScore:
        """
        Args:
            category: Category to score.
            questions: All questions of the test (filtered to the category here).
            answers: ``{question_id: raw value}`` for one evaluator.
            scale: Scale of the test definition.
            is_excluded: Result of the conditional rule evaluation.
            exclusion_reason: Reason to record; rendered from the category's own
                rule when omitted.
        """
        own_questions = [q for q in questions if q.category_id == category.id]

        if is_excluded:
            return CategoryScore(
                category_id=category.id,
                category_name=category.name,
                score=None,
                weighted_score=0.0,
                total_weight=0.0,
                total_questions=len(own_questions),
                is_excluded=True,
                exclusion_reason=exclusion_reason
                or self.rule_evaluator.describe(category.conditional_rule, questions),
            )

        subdimension_scores: List[SubdimensionScore] = [
            self.subdimension_aggregator.score(subdimension, own_questions, answers, scale)
            for subdimension in category.subdimensions
        ]
        loose_scored = [q for q in own_questions if q.subdimension_id is None and q.is_scored]
        if loose_scored:
            subdimension_scores.append(
                self.subdimension_aggregator.score(None, loose_scored, answers, scale)
            )
        answered = sum(1 for q in own_questions if is_answered(answers.get(q.id)))

        weighted_sum = sum(s.weighted_score for s in subdimension_scores)
        total_weight = sum(s.total_weight for s in subdimension_scores)
        if total_weight == 0:
            # Nothing carries weight: scores 0 and stays out of the parent rollup.
            return CategoryScore(
                category_id=category.id,
                category_name=category.name,
                score=0.0,
                answered_questions=answered,
                total_questions=len(own_questions),
                subdimension_scores=subdimension_scores,
            )
        score = weighted_sum / total_weight

        return CategoryScore(
            category_id=category.id,
            category_name=category.name,
            score=score,
            weighted_score=score * category.weight,
            total_weight=category.weight,
            answered_questions=answered,
            total_questions=len(own_questions),
            subdimension_scores=subdimension_scores,
            statistics=self._category_statistics(own_questions, answers, scale),
            is_excluded=False,
        )

    def _category_statistics(
        self,
        questions: Sequence[QuestionBase],
        answers: Mapping[str, Any],
        scale: Scale,
    ):
        values = []
        for question in questions:
            if not question.is_scored:
                continue
            normalized = self.normalizer.normalize(
                answers.get(question.id), question.is_negative, scale, question.type
            )
            if normalized is not None:
                values.append(normalized)
        return statistics.compute(values)
