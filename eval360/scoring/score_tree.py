"""
Score tree for one answer set (one evaluator's submission).

    excluded = rule evaluator over the answers
    category_i = CategoryAggregator(category_i, excluded?)
    overall    = Σ weighted_score / Σ total_weight      over non-excluded categories
"""

from typing import Any, List, Mapping, Optional

from eval360.models.aggregation import CategoryScore, ScoreTree
from eval360.models.test_definition import Category, TestDefinition
from eval360.scoring.category_aggregator import CategoryAggregator
from eval360.scoring.conditional_rules import ConditionalRuleEvaluator


class ScoreTreeBuilder:
    def __init__(
        self,
        category_aggregator: Optional[CategoryAggregator] = None,
        rule_evaluator: Optional[ConditionalRuleEvaluator] = None,
    ):
        self.rule_evaluator = rule_evaluator or ConditionalRuleEvaluator()
        self.category_aggregator = category_aggregator or CategoryAggregator(
            rule_evaluator=self.rule_evaluator
        )

    def build(self, test_definition: TestDefinition, answers: Mapping[str, Any]) -> ScoreTree:
        excluded = self.rule_evaluator.get_excluded_categories(test_definition, answers)

        category_scores = [
            self.category_aggregator.score(
                category,
                test_definition.questions,
                answers,
                test_definition.scale,
                is_excluded=category.id in excluded,
                exclusion_reason=self._exclusion_reason(test_definition, category, answers)
                if category.id in excluded
                else None,
            )
            for category in test_definition.categories
        ]

        included = [c for c in category_scores if not c.is_excluded]
        answered = sum(c.answered_questions for c in included)
        total = sum(c.total_questions for c in included)

        return ScoreTree(
            overall_score=rollup(category_scores),
            completion_percentage=(answered / total * 100) if total > 0 else 0.0,
            answered_questions=answered,
            total_questions=total,
            category_scores=category_scores,
            excluded_categories=[c.id for c in test_definition.categories if c.id in excluded],
            active_rules=self.rule_evaluator.get_active_rules(test_definition, answers),
        )

    def _exclusion_reason(
        self,
        test_definition: TestDefinition,
        category: Category,
        answers: Mapping[str, Any],
    ) -> str:
        if category.is_conditional and self.rule_evaluator.evaluate(category.conditional_rule, answers):
            return self.rule_evaluator.describe(category.conditional_rule, test_definition.questions)
        for rule in test_definition.conditional_rules:
            if rule.category_id == category.id and self.rule_evaluator.evaluate(rule, answers):
                return self.rule_evaluator.describe(rule, test_definition.questions)
        return self.rule_evaluator.describe(None, test_definition.questions)


def rollup(category_scores: List[CategoryScore]) -> float:
    """Weighted mean of non-excluded category scores; 0.0 when nothing carries weight."""
    weighted_sum = 0.0
    total_weight = 0.0
    for category in category_scores:
        if category.is_excluded:
            continue
        weighted_sum += category.weighted_score
        total_weight += category.total_weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0
